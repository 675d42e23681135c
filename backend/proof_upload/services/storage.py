"""Google Drive storage backend for uploaded proofs.

The Drive SDK is blocking; callers in request handlers run these methods in
the thread pool. httplib2 connections are not thread-safe, so the client is
shared but every API call executes on its own authorized transport.
"""

import io
import threading
from typing import Any, Dict, List, Optional

import google.auth
import httplib2
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from proof_upload.core.config import settings
from proof_upload.core.exceptions import ExternalServiceError
from proof_upload.core.logging import get_logger

logger = get_logger(__name__)

DRIVE_SERVICE = "google-drive"
PUBLIC_READ_PERMISSION = {"role": "reader", "type": "anyone"}


def _http_error_reason(exc: HttpError) -> str:
    return str(getattr(exc, "reason", None) or exc)


def _http_error_status(exc: HttpError) -> Optional[int]:
    resp = getattr(exc, "resp", None)
    status = getattr(resp, "status", None)
    return int(status) if status is not None else None


class DriveStorage:
    """Thin wrapper around the Drive v3 ``files`` and ``permissions`` resources."""

    def __init__(
        self,
        key_path: Optional[str] = None,
        scopes: Optional[List[str]] = None,
        service: Any = None,
        credentials: Any = None,
    ) -> None:
        self.key_path = key_path
        self.scopes = scopes or ["https://www.googleapis.com/auth/drive"]
        self._service = service
        self._credentials = credentials
        self._lock = threading.Lock()

    def _load_credentials(self):
        if self.key_path:
            return service_account.Credentials.from_service_account_file(self.key_path, scopes=self.scopes)
        credentials, _ = google.auth.default(scopes=self.scopes)
        return credentials

    @property
    def credentials(self) -> Any:
        with self._lock:
            if self._credentials is None:
                self._credentials = self._load_credentials()
            return self._credentials

    @property
    def service(self) -> Any:
        credentials = self.credentials
        with self._lock:
            if self._service is None:
                logger.info("building drive client", key_path=self.key_path, scopes=self.scopes)
                self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            return self._service

    def _transport(self) -> AuthorizedHttp:
        """Fresh authorized connection for a single API call."""
        return AuthorizedHttp(self.credentials, http=httplib2.Http())

    def create_file(
        self,
        content: bytes,
        mime_type: str,
        metadata: Dict[str, Any],
        fields: str = "id,name,webViewLink,webContentLink",
    ) -> Dict[str, Any]:
        """Upload ``content`` as a new Drive file and return the requested fields."""
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        try:
            return (
                self.service.files()
                .create(body=metadata, media_body=media, fields=fields)
                .execute(http=self._transport())
            )
        except HttpError as exc:
            raise ExternalServiceError(DRIVE_SERVICE, _http_error_reason(exc), _http_error_status(exc)) from exc

    def grant_public_read(self, file_id: str) -> Dict[str, Any]:
        """Make a file readable by anyone holding the link."""
        try:
            return (
                self.service.permissions()
                .create(fileId=file_id, body=dict(PUBLIC_READ_PERMISSION))
                .execute(http=self._transport())
            )
        except HttpError as exc:
            raise ExternalServiceError(DRIVE_SERVICE, _http_error_reason(exc), _http_error_status(exc)) from exc

    def delete_file(self, file_id: str) -> None:
        try:
            self.service.files().delete(fileId=file_id).execute(http=self._transport())
        except HttpError as exc:
            raise ExternalServiceError(DRIVE_SERVICE, _http_error_reason(exc), _http_error_status(exc)) from exc


_storage: Optional[DriveStorage] = None
_storage_lock = threading.Lock()


def get_storage() -> DriveStorage:
    """Return the process-wide Drive client, creating it on first use."""
    global _storage
    with _storage_lock:
        if _storage is None:
            _storage = DriveStorage(
                key_path=settings.google_service_account_key_path,
                scopes=settings.google_drive_scopes,
            )
        return _storage
