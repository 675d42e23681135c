import threading
from unittest.mock import MagicMock

import httplib2
import pytest
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.errors import HttpError

from proof_upload.core.exceptions import ExternalServiceError
from proof_upload.services import storage as storage_module
from proof_upload.services.storage import DriveStorage


def _http_error(status: int, message: str) -> HttpError:
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode("utf-8")
    return HttpError(resp=httplib2.Response({"status": status}), content=content)


def _drive(service: MagicMock) -> DriveStorage:
    return DriveStorage(service=service, credentials=MagicMock())


def test_create_file_sends_metadata_media_and_fields():
    service = MagicMock()
    service.files.return_value.create.return_value.execute.return_value = {"id": "abc", "name": "p.png"}
    drive = _drive(service)

    result = drive.create_file(b"img", "image/png", {"name": "p.png"}, "id,name")

    assert result == {"id": "abc", "name": "p.png"}
    kwargs = service.files.return_value.create.call_args.kwargs
    assert kwargs["body"] == {"name": "p.png"}
    assert kwargs["fields"] == "id,name"
    assert kwargs["media_body"].mimetype() == "image/png"
    assert kwargs["media_body"].resumable() is False


def test_grant_public_read_creates_anyone_reader_permission():
    service = MagicMock()
    drive = _drive(service)

    drive.grant_public_read("abc")

    service.permissions.return_value.create.assert_called_once_with(
        fileId="abc", body={"role": "reader", "type": "anyone"}
    )
    execute = service.permissions.return_value.create.return_value.execute
    assert execute.call_count == 1
    assert isinstance(execute.call_args.kwargs["http"], AuthorizedHttp)


def test_delete_file_calls_files_delete():
    service = MagicMock()
    drive = _drive(service)

    drive.delete_file("abc")

    service.files.return_value.delete.assert_called_once_with(fileId="abc")


def test_each_call_gets_its_own_transport():
    service = MagicMock()
    drive = _drive(service)

    drive.create_file(b"img", "image/png", {"name": "p.png"})
    drive.grant_public_read("abc")

    create_http = service.files.return_value.create.return_value.execute.call_args.kwargs["http"]
    grant_http = service.permissions.return_value.create.return_value.execute.call_args.kwargs["http"]
    assert create_http is not grant_http
    assert create_http.http is not grant_http.http
    assert create_http.credentials is drive.credentials


def test_concurrent_calls_do_not_share_a_transport():
    service = MagicMock()
    transports = []
    barrier = threading.Barrier(2)

    def execute(http):
        transports.append(http)
        barrier.wait(timeout=5)
        return {}

    service.permissions.return_value.create.return_value.execute.side_effect = execute
    drive = _drive(service)

    threads = [threading.Thread(target=drive.grant_public_read, args=(file_id,)) for file_id in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(transports) == 2
    assert transports[0] is not transports[1]
    assert transports[0].http is not transports[1].http


def test_http_errors_become_external_service_errors():
    service = MagicMock()
    service.files.return_value.create.return_value.execute.side_effect = _http_error(403, "Insufficient permissions")
    drive = _drive(service)

    with pytest.raises(ExternalServiceError) as exc_info:
        drive.create_file(b"img", "image/png", {"name": "p.png"})

    assert "Insufficient permissions" in exc_info.value.message
    assert exc_info.value.details == {"service": "google-drive", "status_code": 403}


def test_service_is_built_from_key_file_once(monkeypatch):
    loaded = []
    built = []

    def fake_from_file(path, scopes):
        loaded.append((path, scopes))
        return "creds"

    def fake_build(name, version, credentials, cache_discovery):
        built.append((name, version, credentials))
        return MagicMock()

    monkeypatch.setattr(storage_module.service_account.Credentials, "from_service_account_file", fake_from_file)
    monkeypatch.setattr(storage_module, "build", fake_build)

    drive = DriveStorage(key_path="/secrets/sa.json", scopes=["scope-a"])
    first = drive.service
    second = drive.service

    assert first is second
    assert loaded == [("/secrets/sa.json", ["scope-a"])]
    assert built == [("drive", "v3", "creds")]


def test_default_credentials_used_without_key_file(monkeypatch):
    requested = []

    def fake_default(scopes):
        requested.append(scopes)
        return "adc-creds", "project"

    monkeypatch.setattr(storage_module.google.auth, "default", fake_default)
    monkeypatch.setattr(storage_module, "build", lambda *args, **kwargs: MagicMock())

    drive = DriveStorage()
    drive.service

    assert requested == [["https://www.googleapis.com/auth/drive"]]
