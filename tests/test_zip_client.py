"""
Tests for godotenv.core.zip_client: safe extraction into place.
"""

import os
import stat
import sys
import zipfile

import pytest

from godotenv.core.zip_client import ExtractionError, ZipClient

from conftest import make_zip_bytes


def _write_zip(path, files):
    path.write_bytes(make_zip_bytes(files))
    return str(path)


def _write_symlink_zip(path, link_name, link_target):
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("Godot.app/Contents/MacOS/Godot", b"bin")
        info = zipfile.ZipInfo(link_name)
        info.external_attr = (stat.S_IFLNK | 0o777) << 16
        zf.writestr(info, link_target)
    return str(path)


class TestExtract:
    def test_extracts_files_and_keeps_mode(self, tmp_path):
        archive = _write_zip(tmp_path / "a.zip", {"dir/": b"", "dir/godot": b"exe"})
        dest = tmp_path / "out"

        ZipClient().extract_to_directory(archive, str(dest))

        assert (dest / "dir" / "godot").read_bytes() == b"exe"
        if sys.platform != "win32":
            assert os.access(dest / "dir" / "godot", os.X_OK)

    def test_progress_fractions_end_at_one(self, tmp_path):
        archive = _write_zip(tmp_path / "a.zip", {"a": b"1", "b": b"2", "c": b"3", "d": b"4"})
        fractions = []

        ZipClient().extract_to_directory(archive, str(tmp_path / "out"), fractions.append)

        assert fractions == [0.25, 0.5, 0.75, 1.0]

    def test_empty_archive_reports_complete(self, tmp_path):
        archive = _write_zip(tmp_path / "a.zip", {})
        fractions = []

        ZipClient().extract_to_directory(archive, str(tmp_path / "out"), fractions.append)

        assert fractions == [1.0]
        assert (tmp_path / "out").is_dir()

    def test_existing_destination_is_replaced(self, tmp_path):
        dest = tmp_path / "out"
        dest.mkdir()
        (dest / "stale").write_text("old")
        archive = _write_zip(tmp_path / "a.zip", {"fresh": b"new"})

        ZipClient().extract_to_directory(archive, str(dest))

        assert sorted(os.listdir(dest)) == ["fresh"]

    def test_no_temporary_directories_left(self, tmp_path):
        archive = _write_zip(tmp_path / "a.zip", {"a": b"1"})
        ZipClient().extract_to_directory(archive, str(tmp_path / "out"))

        assert sorted(os.listdir(tmp_path)) == ["a.zip", "out"]


class TestRejects:
    def test_corrupt_archive(self, tmp_path):
        archive = tmp_path / "bad.zip"
        archive.write_bytes(b"not a zip")

        with pytest.raises(ExtractionError):
            ZipClient().extract_to_directory(str(archive), str(tmp_path / "out"))
        assert not (tmp_path / "out").exists()

    def test_path_traversal(self, tmp_path):
        archive = _write_zip(tmp_path / "a.zip", {"../escape": b"x"})

        with pytest.raises(ExtractionError):
            ZipClient().extract_to_directory(archive, str(tmp_path / "out"))
        assert not (tmp_path / "escape").exists()
        assert not (tmp_path / "out").exists()


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need elevated rights on Windows")
class TestSymlinks:
    def test_relative_symlink_restored(self, tmp_path):
        archive = _write_symlink_zip(tmp_path / "a.zip", "Godot.app/Contents/MacOS/link", "Godot")
        dest = tmp_path / "out"

        ZipClient().extract_to_directory(archive, str(dest))

        link = dest / "Godot.app" / "Contents" / "MacOS" / "link"
        assert link.is_symlink()
        assert os.readlink(link) == "Godot"

    def test_escaping_symlink_rejected(self, tmp_path):
        archive = _write_symlink_zip(tmp_path / "a.zip", "Godot.app/link", "../../../etc/passwd")

        with pytest.raises(ExtractionError):
            ZipClient().extract_to_directory(archive, str(tmp_path / "out"))

    def test_absolute_symlink_rejected(self, tmp_path):
        archive = _write_symlink_zip(tmp_path / "a.zip", "Godot.app/link", "/etc/passwd")

        with pytest.raises(ExtractionError):
            ZipClient().extract_to_directory(archive, str(tmp_path / "out"))
