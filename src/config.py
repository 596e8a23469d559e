from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dotenv import load_dotenv

load_dotenv()

# Graph requires every non-final slice to be a multiple of 320 KiB
SLICE_UNIT = 320 * 1024


class Settings(BaseSettings):

    # SharePoint / Microsoft Graph
    CLIENT_ID: str
    CLIENT_SECRET: str
    TENANT_ID: str
    SITE_ID: str
    DRIVE_ID: str
    GRAPH_BASE_URL: str = "https://graph.microsoft.com/v1.0"
    AUTHORITY_HOST: str = "https://login.microsoftonline.com"
    GRAPH_SCOPE: str = "https://graph.microsoft.com/.default"

    # Legacy document-export service
    EXPORT_URL: str
    EXPORT_USERNAME: str
    EXPORT_PASSWORD: str
    EXPORT_ALIAS: str
    EXPORT_COMPANY_ID: str
    EXPORT_API_TOKEN: str

    # Server
    ENV: str = "development"
    PORT: int = 4000
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    HTTP_TIMEOUT: float = 30.0
    UPLOAD_CHUNK_SIZE: int = SLICE_UNIT
    CHECK_REQUEST_MAX_FILE_SIZE: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("UPLOAD_CHUNK_SIZE")
    @classmethod
    def check_chunk_size(cls, v: int) -> int:
        if v <= 0 or v % SLICE_UNIT:
            raise ValueError(f"UPLOAD_CHUNK_SIZE must be a positive multiple of {SLICE_UNIT}")
        return v

    @field_validator("GRAPH_BASE_URL", "AUTHORITY_HOST")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process and never mutated afterwards."""
    return Settings()
