from pydantic import BaseModel


class FileInfo(BaseModel):
    id: str
    filename: str
    size: int
    content_hash: str
    path: str


class UploadResponse(BaseModel):
    success: bool
    file: FileInfo


class HealthResponse(BaseModel):
    status: str
    service: str
