"""Application configuration using Pydantic Settings."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App metadata
    app_name: str = Field(default="proof-upload-api", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")

    # Environment
    env: str = Field(default="dev", description="Environment: dev|prod")
    port: int = Field(default=3000, description="Server port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json|text)")

    # Google Drive
    google_service_account_key_path: Optional[str] = Field(
        default=None,
        description="Service account key file; Application Default Credentials are used when unset",
    )
    google_drive_folder_id: Optional[str] = Field(default=None, description="Destination folder id")
    google_drive_scopes: List[str] = Field(
        default_factory=lambda: ["https://www.googleapis.com/auth/drive"],
        description="OAuth scopes requested for the Drive client",
    )

    # Uploads
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="Largest accepted screenshot")
    delete_on_share_failure: bool = Field(
        default=False,
        description="Delete the created file when making it public fails",
    )

    # HTTP
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    @property
    def is_dev(self) -> bool:
        return (self.env or "dev").lower() == "dev"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
