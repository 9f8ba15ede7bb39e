"""
网络客户端模块。

基于 requests 提供带进度回调和取消支持的文件下载，以及普通 GET 请求。
"""

import os
import threading
from typing import Optional

import requests

from godotenv.utils.logger import get_logger
from godotenv.core.interfaces import INetworkClient, ByteProgressCallback

logger = get_logger()

CHUNK_SIZE = 8192
USER_AGENT = "godotenv"


class NetworkClientError(Exception):
    """网络客户端错误异常。"""
    pass


class DownloadError(NetworkClientError):
    """下载错误异常。"""
    pass


class DownloadCancelledError(NetworkClientError):
    """下载已取消异常。"""
    pass


class NetworkClient(INetworkClient):
    """
    网络客户端类。

    下载失败或被取消时会删除未完成的文件，不做自动重试。
    实现 INetworkClient 抽象接口。
    """

    def __init__(
        self,
        download_timeout: int = 300,
        request_timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化网络客户端。

        参数:
            download_timeout: 下载请求超时时间（秒）
            request_timeout: 普通请求超时时间（秒）
            session: 可选的 requests 会话
        """
        self.download_timeout = download_timeout
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def download_file(
        self,
        url: str,
        destination_dir: str,
        filename: str,
        progress_callback: Optional[ByteProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """
        流式下载文件到目标目录。

        参数:
            url: 下载 URL
            destination_dir: 目标目录
            filename: 目标文件名
            progress_callback: 进度回调函数，参数为 (已下载字节数, 总字节数)
            cancel_event: 取消信号，在每个数据块之间检查

        抛出:
            DownloadError: HTTP 错误或网络错误时抛出
            DownloadCancelledError: 下载被取消时抛出
        """
        destination = os.path.join(destination_dir, filename)
        completed = False
        logger.info(f"正在从 {url} 下载到 {destination}")

        try:
            if cancel_event is not None and cancel_event.is_set():
                raise DownloadCancelledError(f"下载已取消: {url}")

            response = self.session.get(url, stream=True, timeout=self.download_timeout)
            try:
                response.raise_for_status()
                total_size = int(response.headers.get("content-length", 0))
                downloaded = 0

                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if cancel_event is not None and cancel_event.is_set():
                            raise DownloadCancelledError(f"下载已取消: {url}")
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(downloaded, total_size)
            finally:
                response.close()

            completed = True
            logger.info(f"下载完成: {destination} ({downloaded} 字节)")
        except requests.exceptions.RequestException as e:
            error_msg = f"下载 {url} 失败: {e}"
            logger.error(error_msg)
            raise DownloadError(error_msg) from e
        finally:
            if not completed and os.path.exists(destination):
                os.remove(destination)
                logger.debug(f"已删除未完成的下载文件 {destination}")

    def web_request_get(self, url: str) -> requests.Response:
        """
        发送 GET 请求。

        参数:
            url: 请求 URL

        返回:
            响应对象（未检查状态码）
        """
        logger.debug(f"GET {url}")
        return self.session.get(url, timeout=self.request_timeout)
