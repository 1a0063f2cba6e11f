from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class StorageInfoResponse(BaseModel):
    mode: str  # 's3' or 'disabled'
    enabled: bool
    host: str
    bucket_name: str


class BucketListResponse(BaseModel):
    buckets: List[str]


class BucketCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="作成するバケット名")


class BucketResponse(BaseModel):
    name: str


class BucketExistsResponse(BaseModel):
    bucket: str
    exists: bool


class DirectoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="作成するディレクトリ名（例: runs/1）")


class DirectoryResponse(BaseModel):
    bucket: str
    name: str


class UploadedFileResponse(BaseModel):
    bucket: str
    key: str
    size: int
    content_type: str


class FileExistsResponse(BaseModel):
    bucket: str
    key: str
    exists: bool


class FolderResponse(BaseModel):
    name: str
    folders: Dict[str, 'FolderResponse'] = Field(default_factory=dict)


# 自己参照モデルのための更新
FolderResponse.model_rebuild()


class FolderTreeResponse(BaseModel):
    bucket: str
    recursive: bool
    root: FolderResponse
