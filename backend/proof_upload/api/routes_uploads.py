"""Proof upload endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from proof_upload.core.config import settings
from proof_upload.core.logging import get_logger
from proof_upload.schemas.requests import ProofUploadForm
from proof_upload.schemas.responses import UploadErrorResponse, UploadSuccessResponse
from proof_upload.services.proof_upload import read_screenshot, upload_proof
from proof_upload.services.storage import DriveStorage, get_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/apps/api", tags=["uploads"])

UPLOAD_FAILED_MESSAGE = "Failed to upload file"


@router.post(
    "/proof-upload",
    response_model=UploadSuccessResponse,
    responses={400: {"model": UploadErrorResponse}, 500: {"model": UploadErrorResponse}},
)
async def upload_payment_proof(
    screenshot: Optional[UploadFile] = File(default=None),
    name: Optional[str] = Form(default=None),
    order_number: Optional[str] = Form(default=None, alias="orderNumber"),
    mobile: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    notes: Optional[str] = Form(default=None),
    storage: DriveStorage = Depends(get_storage),
):
    """Store a payment screenshot in Drive and return its public link."""
    form = ProofUploadForm(
        name=name or "",
        order_number=order_number or "",
        mobile=mobile or "",
        email=email or "",
        notes=notes,
    )

    # Rejected files raise ValidationError and never reach storage
    upload = await read_screenshot(screenshot, settings.max_upload_bytes)

    logger.info("processing upload", order_number=form.order_number, size=upload.size, mime_type=upload.mime_type)

    try:
        result = await upload_proof(form, upload, storage, settings)
    except Exception as e:
        logger.exception("upload error", order_number=form.order_number)
        message = getattr(e, "message", None) or str(e) or UPLOAD_FAILED_MESSAGE
        return JSONResponse(status_code=500, content=UploadErrorResponse(error=message).model_dump())

    return UploadSuccessResponse(file_url=result.file_url, file_name=result.file_name)
