"""Response schemas for the proof upload API."""

from pydantic import BaseModel, ConfigDict, Field


class UploadSuccessResponse(BaseModel):
    """Returned once the proof is stored and shared."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    message: str = Field(default="Proof uploaded successfully!")
    file_url: str = Field(..., alias="fileUrl", description="Public view link of the stored file")
    file_name: str = Field(..., alias="fileName", description="Name of the stored file")


class UploadErrorResponse(BaseModel):
    """Failure body shared by every error path."""

    success: bool = Field(default=False)
    error: str = Field(..., description="Human-readable reason")


class HealthResponse(BaseModel):
    status: str = Field(default="OK")
    service: str = Field(default="Proof Upload API")
