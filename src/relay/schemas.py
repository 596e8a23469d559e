from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from src.config import Settings


class FileDescriptor(BaseModel):
    fieldid: str
    filename: str

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class UploadRequest(BaseModel):
    objectid: str
    files: List[FileDescriptor]

    model_config = ConfigDict(coerce_numbers_to_str=True)


class UploadParams(BaseModel):
    """Query parameters sent to the export service for a single file."""
    username: str
    alias: str
    companyid: str
    password: str
    objectid: str
    fieldid: str
    filename: str
    apitoken: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(cls, settings: Settings, objectid: str, descriptor: FileDescriptor) -> "UploadParams":
        return cls(
            username=settings.EXPORT_USERNAME,
            alias=settings.EXPORT_ALIAS,
            companyid=settings.EXPORT_COMPANY_ID,
            password=settings.EXPORT_PASSWORD,
            objectid=objectid,
            fieldid=descriptor.fieldid,
            filename=descriptor.filename,
            apitoken=settings.EXPORT_API_TOKEN,
        )


class UploadSession(BaseModel):
    upload_url: str
    expiration: Optional[str] = None


class FailedUpload(BaseModel):
    filename: str
    error: str


class UploadResponse(BaseModel):
    status: str = "success"
    successfulUploads: List[str]
    failedUploads: List[FailedUpload]


class FailureResponse(BaseModel):
    status: str = "failure"
    error: str


class CheckRequestResponse(BaseModel):
    status: str = "success"
    message: str = "Request received"


@dataclass
class BatchResult:
    successful: List[str] = field(default_factory=list)
    failed: List[FailedUpload] = field(default_factory=list)

    def record_success(self, filename: str) -> None:
        self.successful.append(filename)

    def record_failure(self, filename: str, error: str) -> None:
        self.failed.append(FailedUpload(filename=filename, error=error))

    def __len__(self) -> int:
        return len(self.successful) + len(self.failed)

    def to_response(self) -> UploadResponse:
        return UploadResponse(successfulUploads=self.successful, failedUploads=self.failed)
