"""
Shared test fixtures for the godotenv test suite.

  - FakeNetworkClient: writes a real zip archive instead of downloading
  - FakePlatform: fixed executable / GodotSharp layout, records shortcuts
  - FakeEnvManager: in-memory environment variables
  - repository: GodotRepository wired to a temporary app data directory
"""

import io
import os
import zipfile
from unittest import mock

import pytest

from godotenv.core.config_manager import ConfigManager
from godotenv.core.file_client import FileClient
from godotenv.core.godot_repository import GodotRepository
from godotenv.core.interfaces import IEnvManager, IGodotPlatform, INetworkClient
from godotenv.core.network_client import DownloadCancelledError
from godotenv.core.zip_client import ZipClient

EXECUTABLE = "Godot_v4/godot"
DOTNET_EXECUTABLE = "Godot_v4_mono/godot"
GODOT_SHARP = "Godot_v4_mono/GodotSharp"


def make_zip_bytes(files):
    """Build an in-memory zip archive from a {name: content} dict."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            info = zipfile.ZipInfo(name)
            if name.endswith("/"):
                info.external_attr = (0o40755 << 16) | 0x10
                zf.writestr(info, b"")
            else:
                info.external_attr = 0o100755 << 16
                zf.writestr(info, content)
    return buffer.getvalue()


class FakeNetworkClient(INetworkClient):
    """Network client that serves a generated Godot-like archive."""

    def __init__(self):
        self.files = {
            EXECUTABLE: b"#!/bin/sh\necho godot\n",
            DOTNET_EXECUTABLE: b"#!/bin/sh\necho godot mono\n",
            GODOT_SHARP + "/": b"",
            GODOT_SHARP + "/Api/GodotSharp.dll": b"dll",
        }
        self.downloads = []
        self.error = None
        self.cancel_after_bytes = None
        self.response = mock.MagicMock()

    def download_file(self, url, destination_dir, filename, progress_callback=None, cancel_event=None):
        self.downloads.append((url, destination_dir, filename))
        if self.error is not None:
            raise self.error

        payload = make_zip_bytes(self.files)
        total = len(payload)
        step = max(1, total // 10)
        path = os.path.join(destination_dir, filename)

        with open(path, "wb") as f:
            for offset in range(0, total, step):
                if cancel_event is not None and cancel_event.is_set():
                    raise DownloadCancelledError(f"cancelled: {url}")
                f.write(payload[offset:offset + step])
                written = min(total, offset + step)
                if progress_callback:
                    progress_callback(written, total)
                if self.cancel_after_bytes is not None and written >= self.cancel_after_bytes:
                    cancel_event.set()

    def web_request_get(self, url):
        self.response.url = url
        return self.response


class FakePlatform(IGodotPlatform):
    """Platform with a fixed archive layout."""

    def __init__(self):
        self.shortcuts = []

    def get_download_url(self, version, is_dotnet):
        flavor = "_mono" if is_dotnet else ""
        return f"https://example.invalid/{version}/Godot{flavor}.zip"

    def get_relative_extracted_executable_path(self, version, is_dotnet):
        return DOTNET_EXECUTABLE if is_dotnet else EXECUTABLE

    def get_relative_godot_sharp_path(self, version, is_dotnet):
        return GODOT_SHARP

    def create_shortcuts(self, symlink_path, installation_path):
        self.shortcuts.append((symlink_path, installation_path))

    def get_env_refresh_hint(self):
        return None


class FakeEnvManager(IEnvManager):
    """In-memory environment variables."""

    def __init__(self):
        self.values = {}

    def get_env_var(self, name):
        return self.values.get(name)

    def set_env_var(self, name, value):
        self.values[name] = value


@pytest.fixture
def network():
    return FakeNetworkClient()


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def env_manager():
    return FakeEnvManager()


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(tmp_path)


@pytest.fixture
def repository(tmp_path, config_manager, network, platform, env_manager):
    """GodotRepository rooted at tmp_path with fake network and platform."""
    return GodotRepository(
        config_manager=config_manager,
        file_client=FileClient(tmp_path),
        network_client=network,
        zip_client=ZipClient(),
        platform=platform,
        env_manager=env_manager,
    )
