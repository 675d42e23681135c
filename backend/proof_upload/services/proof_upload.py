"""Proof-of-payment upload flow.

Reads and filters the screenshot, names it after the order, stores it in
Drive and makes it public. Create and share run as one unit; the share call
depends on the id returned by the create call.
"""

import time
from typing import Any, Dict, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from proof_upload.core.config import Settings, settings as default_settings
from proof_upload.core.exceptions import ValidationError
from proof_upload.core.logging import get_logger
from proof_upload.schemas.requests import ProofUploadForm, ScreenshotUpload
from proof_upload.services.storage import DriveStorage
from proof_upload.utils.text import file_extension, or_placeholder

logger = get_logger(__name__)

DRIVE_FIELDS = "id,name,webViewLink,webContentLink"
READ_CHUNK_BYTES = 1024 * 1024

MISSING_FILE_MESSAGE = "Please select a file to upload"
NOT_AN_IMAGE_MESSAGE = "Only image files are allowed!"


class UploadResult(BaseModel):
    """What Drive reported back for the stored proof."""

    file_id: str
    file_name: str
    file_url: str = Field(..., description="webViewLink")
    download_url: Optional[str] = Field(default=None, description="webContentLink")


def is_image(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


async def read_screenshot(file: Optional[UploadFile], max_bytes: int) -> ScreenshotUpload:
    """Read the uploaded screenshot, rejecting anything that is not a small image.

    The content type is checked before any bytes are read. The part has
    already been spooled by the multipart parser; the size limit stops the
    copy into memory at the first chunk past ``max_bytes``.
    """

    if file is None or not file.filename:
        raise ValidationError(MISSING_FILE_MESSAGE, field="screenshot")

    if not is_image(file.content_type):
        raise ValidationError(NOT_AN_IMAGE_MESSAGE, field="screenshot")

    buf = bytearray()
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise ValidationError(
                f"File too large (max {max_bytes // (1024 * 1024)}MB)",
                field="screenshot",
            )

    return ScreenshotUpload(file_name=file.filename, mime_type=file.content_type, content=bytes(buf))


def build_file_name(order_number: str, original_name: str, now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"Payment_Proof_{order_number}_{now_ms}{file_extension(original_name)}"


def build_description(form: ProofUploadForm) -> str:
    return (
        f"Proof of payment for Order #{form.order_number}\n"
        f"Customer: {form.name}\n"
        f"Email: {form.email}\n"
        f"Mobile: {form.mobile}\n"
        f"Notes: {or_placeholder(form.notes)}"
    )


def build_metadata(form: ProofUploadForm, screenshot: ScreenshotUpload, folder_id: Optional[str]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {
        "name": build_file_name(form.order_number, screenshot.file_name),
        "description": build_description(form),
    }
    if folder_id:
        metadata["parents"] = [folder_id]
    return metadata


async def upload_proof(
    form: ProofUploadForm,
    screenshot: ScreenshotUpload,
    storage: DriveStorage,
    settings: Settings = default_settings,
) -> UploadResult:
    """Store the screenshot in Drive and share it publicly."""

    metadata = build_metadata(form, screenshot, settings.google_drive_folder_id)

    created = await run_in_threadpool(
        storage.create_file,
        screenshot.content,
        screenshot.mime_type,
        metadata,
        DRIVE_FIELDS,
    )
    file_id = created["id"]
    logger.info("file uploaded", file_id=file_id, file_name=created.get("name"), order_number=form.order_number)

    try:
        await run_in_threadpool(storage.grant_public_read, file_id)
    except Exception:
        if not settings.delete_on_share_failure:
            logger.error("sharing failed, file left private", file_id=file_id, order_number=form.order_number)
            raise
        logger.error("sharing failed, deleting file", file_id=file_id, order_number=form.order_number)
        try:
            await run_in_threadpool(storage.delete_file, file_id)
        except Exception as cleanup_exc:
            logger.error("cleanup delete failed", file_id=file_id, error=str(cleanup_exc))
        raise

    return UploadResult(
        file_id=file_id,
        file_name=created.get("name") or metadata["name"],
        file_url=created.get("webViewLink") or "",
        download_url=created.get("webContentLink"),
    )
