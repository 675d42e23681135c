import os
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time; keep tests pointed at a fake folder.
os.environ["GOOGLE_DRIVE_FOLDER_ID"] = "test-folder"
os.environ.pop("GOOGLE_SERVICE_ACCOUNT_KEY_PATH", None)

from proof_upload.main import app  # noqa: E402
from proof_upload.services.storage import get_storage  # noqa: E402


class FakeDriveStorage:
    """In-memory stand-in for DriveStorage that records every call in order."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.created: Dict[str, Dict[str, Any]] = {}
        self.create_error: Optional[Exception] = None
        self.grant_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None

    def create_file(self, content: bytes, mime_type: str, metadata: Dict[str, Any], fields: str) -> Dict[str, Any]:
        self.calls.append(("create_file", {"content": content, "mime_type": mime_type, "metadata": metadata, "fields": fields}))
        if self.create_error is not None:
            raise self.create_error
        file_id = f"file-{len(self.created) + 1}"
        record = {
            "id": file_id,
            "name": metadata["name"],
            "webViewLink": f"https://drive.google.com/file/d/{file_id}/view",
            "webContentLink": f"https://drive.google.com/uc?id={file_id}&export=download",
        }
        self.created[file_id] = record
        return record

    def grant_public_read(self, file_id: str) -> Dict[str, Any]:
        self.calls.append(("grant_public_read", file_id))
        if self.grant_error is not None:
            raise self.grant_error
        return {"id": "anyoneWithLink", "role": "reader", "type": "anyone"}

    def delete_file(self, file_id: str) -> None:
        self.calls.append(("delete_file", file_id))
        if self.delete_error is not None:
            raise self.delete_error
        self.created.pop(file_id, None)

    @property
    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_storage() -> FakeDriveStorage:
    return FakeDriveStorage()


@pytest.fixture
def client(fake_storage):
    app.dependency_overrides[get_storage] = lambda: fake_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def order_form() -> Dict[str, str]:
    return {
        "name": "Jane Doe",
        "orderNumber": "A1001",
        "mobile": "+15550100",
        "email": "jane@example.com",
    }
