"""Tests for zencloud.api and the StorageClient transport."""

from __future__ import annotations

import os

import httpx
import pytest

from zencloud.api import delete_file, download_file, list_files, save_download, upload_file
from zencloud.client import OperationFailed
from zencloud.models import DownloadedFile, FileRecord


@pytest.mark.unit
class TestListFiles:
    def test_keeps_server_order(self, server, client) -> None:
        server.reply("GET", "/files", json=[{"id": "b", "filename": "z.txt"}, {"id": "a", "filename": "a.txt"}])

        files = list_files(client)

        assert [f.id for f in files] == ["b", "a"]
        assert [f.filename for f in files] == ["z.txt", "a.txt"]

    def test_parses_optional_metadata(self, server, client) -> None:
        server.reply(
            "GET",
            "/files",
            json=[{"id": 9, "filename": "r.pdf", "extension": ".pdf", "upload_date": "2024-05-01T10:00:00Z"}],
        )

        assert list_files(client) == [
            FileRecord(id="9", filename="r.pdf", extension=".pdf", upload_date="2024-05-01T10:00:00Z")
        ]

    @pytest.mark.parametrize("body", [b"null", b"", b"  \n"])
    def test_null_or_empty_body_is_empty_list(self, server, client, body: bytes) -> None:
        server.reply("GET", "/files", content=body)

        assert list_files(client) == []

    def test_non_success_status_fails(self, server, client) -> None:
        server.reply("GET", "/files", status_code=500, text="db down")

        with pytest.raises(OperationFailed) as excinfo:
            list_files(client)

        assert excinfo.value.status_code == 500
        assert "db down" in str(excinfo.value)

    def test_transport_error_fails(self, server, client) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        server.respond_with("GET", "/files", refuse)

        with pytest.raises(OperationFailed, match="connection refused"):
            list_files(client)

    def test_object_body_is_rejected(self, server, client) -> None:
        server.reply("GET", "/files", json={"files": []})

        with pytest.raises(OperationFailed):
            list_files(client)

    def test_row_without_id_is_rejected(self, server, client) -> None:
        server.reply("GET", "/files", json=[{"filename": "x"}])

        with pytest.raises(OperationFailed):
            list_files(client)


@pytest.mark.unit
class TestUploadFile:
    def test_sends_single_multipart_field(self, server, client, tmp_path) -> None:
        local = tmp_path / "notes.txt"
        local.write_bytes(b"hello zencloud")
        server.reply("POST", "/upload", json={"id": 42, "filename": "notes.txt"})

        result = upload_file(client, local)

        assert result.id == "42"
        assert result.filename == "notes.txt"
        request = server.calls("POST", "/upload")[0]
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="file"; filename="notes.txt"' in request.content
        assert b"hello zencloud" in request.content

    def test_name_overrides_basename(self, server, client, tmp_path) -> None:
        local = tmp_path / "tmp123.bin"
        local.write_bytes(b"\x00\x01")
        server.reply("POST", "/upload", json={"id": "u-1"})

        result = upload_file(client, local, name="renamed.bin")

        assert result.filename == "renamed.bin"
        assert b'filename="renamed.bin"' in server.calls("POST", "/upload")[0].content

    def test_response_without_id_fails(self, server, client, tmp_path) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        server.reply("POST", "/upload", json={"status": "ok"})

        with pytest.raises(OperationFailed):
            upload_file(client, local)

    def test_server_rejection_fails(self, server, client, tmp_path) -> None:
        local = tmp_path / "a.txt"
        local.write_text("a")
        server.reply("POST", "/upload", status_code=400, text="File not provided")

        with pytest.raises(OperationFailed, match="400"):
            upload_file(client, local)


@pytest.mark.unit
class TestDownloadAndDelete:
    def test_download_passes_id_and_returns_bytes(self, server, client) -> None:
        server.reply("GET", "/download", content=b"\x89PNG data", headers={"content-type": "image/png"})

        downloaded = download_file(client, "abc", filename="cat.png")

        assert downloaded == DownloadedFile(content=b"\x89PNG data", filename="cat.png")
        assert server.calls("GET", "/download")[0].url.params["id"] == "abc"

    def test_download_falls_back_to_disposition_then_id(self, server, client) -> None:
        server.reply(
            "GET",
            "/download",
            content=b"x",
            headers={"content-disposition": 'attachment; filename="report.pdf"'},
        )
        assert download_file(client, "7").filename == "report.pdf"

        server.reply("GET", "/download", content=b"x")
        assert download_file(client, "7").filename == "7"

    def test_download_not_found_fails(self, server, client) -> None:
        server.reply("GET", "/download", status_code=404, text="File not found")

        with pytest.raises(OperationFailed, match="File not found"):
            download_file(client, "missing")

    def test_delete_uses_delete_method(self, server, client) -> None:
        server.reply("DELETE", "/delete", text="File deleted successfully")

        delete_file(client, "7")

        request = server.calls("DELETE", "/delete")[0]
        assert request.url.params["id"] == "7"

    def test_delete_failure(self, server, client) -> None:
        server.reply("DELETE", "/delete", status_code=404, text="File not found")

        with pytest.raises(OperationFailed):
            delete_file(client, "7")


@pytest.mark.unit
class TestSaveDownload:
    def test_saves_into_directory_under_suggested_name(self, tmp_path) -> None:
        saved = save_download(DownloadedFile(content=b"abc", filename="a.txt"), tmp_path)

        assert saved == tmp_path / "a.txt"
        assert saved.read_bytes() == b"abc"
        assert [p.name for p in tmp_path.iterdir()] == ["a.txt"]

    def test_strips_directories_from_suggested_name(self, tmp_path) -> None:
        saved = save_download(DownloadedFile(content=b"abc", filename="../../etc/passwd"), tmp_path)

        assert saved == tmp_path / "passwd"

    @pytest.mark.parametrize("name", ["..", ".", ""])
    def test_dot_names_fall_back_to_default(self, tmp_path, name: str) -> None:
        saved = save_download(DownloadedFile(content=b"abc", filename=name), tmp_path)

        assert saved == tmp_path / "download"
        assert saved.read_bytes() == b"abc"

    def test_temporary_file_removed_when_rename_fails(self, tmp_path, monkeypatch) -> None:
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        with pytest.raises(OSError, match="disk full"):
            save_download(DownloadedFile(content=b"abc", filename="a.txt"), tmp_path / "out.txt")

        assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_requests_are_written_to_http_log(server, client, tmp_path) -> None:
    server.reply("GET", "/files", json=[])

    list_files(client)

    log = (tmp_path / "http.log").read_text(encoding="utf-8")
    assert "GET http://files.test/files" in log
    assert "status=200 response=[]" in log


@pytest.mark.unit
def test_large_json_bodies_are_truncated_in_http_log(server, client, tmp_path) -> None:
    rows = [{"id": i, "filename": f"{i:04d}-" + "x" * 45} for i in range(200)]
    server.reply("GET", "/files", json=rows)

    assert len(list_files(client)) == 200

    lines = (tmp_path / "http.log").read_text(encoding="utf-8").splitlines()
    assert max(len(line) for line in lines) < 2300
    assert "...[truncated " in lines[-1]
