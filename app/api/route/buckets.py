"""バケット・オブジェクトAPI

S3互換ストレージへの操作を行うAPIエンドポイント:
- GET  /api/storage/info: ストレージ情報
- GET  /api/buckets: バケット一覧
- POST /api/buckets: バケット作成
- GET  /api/buckets/{bucket}/exists: バケット存在確認
- GET  /api/buckets/{bucket}/tree: フォルダツリー取得
- POST /api/buckets/{bucket}/directories: ディレクトリ作成
- PUT  /api/buckets/{bucket}/files/{file_path}: ファイルアップロード
- GET  /api/buckets/{bucket}/files/{file_path}: ファイルダウンロード
- GET  /api/buckets/{bucket}/files-exists/{file_path}: ファイル存在確認
"""

import json
import logging
import posixpath
from urllib.parse import quote
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response, StreamingResponse

from api.dependencies import get_storage_helper
from api.response_model import (
    StorageInfoResponse,
    BucketListResponse,
    BucketCreateRequest,
    BucketResponse,
    BucketExistsResponse,
    DirectoryCreateRequest,
    DirectoryResponse,
    UploadedFileResponse,
    FileExistsResponse,
    FolderTreeResponse
)
from services.objectstore import (
    StorageHelper,
    StorageError,
    StorageConfigError,
    StorageAccessError,
    StorageDisabledError
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== Utility Functions ====================

def to_http_exception(e: Exception, operation: str) -> HTTPException:
    """
    ストレージ例外をHTTPExceptionに変換する

    Args:
        e: 発生した例外
        operation: ログ出力用の操作名

    Returns:
        HTTPException: 対応するステータスコードの例外
    """
    if isinstance(e, StorageDisabledError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, StorageConfigError):
        logger.error(f"Storage config error in {operation}: {e}")
        return HTTPException(status_code=500, detail="Storage is misconfigured")
    if isinstance(e, StorageAccessError):
        logger.error(f"Storage access error in {operation}: {e} ({e.__cause__})")
        return HTTPException(status_code=502, detail=str(e))
    logger.error(f"Unexpected error in {operation}: {e}")
    return HTTPException(status_code=500, detail="Internal server error")


def split_file_path(file_path: str):
    """'dir/sub/name.txt' -> ('dir/sub', 'name.txt')"""
    directory, file_name = posixpath.split(file_path.strip('/'))
    if not file_name:
        raise HTTPException(status_code=400, detail="file path must include a file name")
    return directory, file_name


def content_disposition(file_name: str) -> str:
    """
    ダウンロード用のContent-Dispositionヘッダー値を組み立てる

    filenameにはASCIIの印字可能文字のみ（"と\\はエスケープ）、
    元の名前はRFC 5987形式のfilename*で渡す。
    """
    fallback = ''.join(
        ch for ch in file_name if ch.isascii() and ch.isprintable()
    ).replace('\\', '\\\\').replace('"', '\\"')
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(file_name, safe="")}'


# ==================== Endpoints ====================

@router.get("/storage/info", tags=["storage"], response_model=StorageInfoResponse)
def get_storage_info(storage: StorageHelper = Depends(get_storage_helper)):
    """ストレージの有効/無効と接続先を取得する"""
    return StorageInfoResponse(
        mode='s3' if storage.enabled else 'disabled',
        enabled=storage.enabled,
        host=storage.get_s3_host(),
        bucket_name=storage.get_bucket_name()
    )


@router.get("/buckets", tags=["buckets"], response_model=BucketListResponse)
def list_buckets(storage: StorageHelper = Depends(get_storage_helper)):
    """バケット一覧を取得する（無効時は空）"""
    try:
        return BucketListResponse(buckets=storage.list_buckets())
    except StorageError as e:
        raise to_http_exception(e, "list_buckets")


@router.post("/buckets", tags=["buckets"], response_model=BucketResponse, status_code=201)
def create_bucket(
    body: BucketCreateRequest,
    storage: StorageHelper = Depends(get_storage_helper)
):
    """バケットを作成する"""
    try:
        storage.create_bucket(body.name)
    except StorageError as e:
        raise to_http_exception(e, "create_bucket")
    return BucketResponse(name=body.name)


@router.get("/buckets/{bucket}/exists", tags=["buckets"], response_model=BucketExistsResponse)
def bucket_exists(bucket: str, storage: StorageHelper = Depends(get_storage_helper)):
    """バケットが存在するか確認する"""
    try:
        exists = storage.bucket_exists(bucket)
    except StorageError as e:
        raise to_http_exception(e, "bucket_exists")
    return BucketExistsResponse(bucket=bucket, exists=exists)


@router.get(
    "/buckets/{bucket}/tree",
    tags=["buckets"],
    response_model=None,
    responses={200: {"model": FolderTreeResponse}}
)
def get_folder_tree(
    bucket: str,
    recursive: bool = Query(False, description="Trueの場合は全階層を取得"),
    storage: StorageHelper = Depends(get_storage_helper)
):
    """
    バケット内のオブジェクトキーからフォルダツリーを構築して返す

    Args:
        bucket: バケット名
        recursive: 全階層を取得するかどうか（デフォルト: 直下のみ）

    Returns:
        FolderTreeResponse: ルートをバケット名とするフォルダツリー
    """
    try:
        root = storage.list_bucket_folder(bucket, recursive=recursive)
    except StorageError as e:
        raise to_http_exception(e, "get_folder_tree")

    if root is None:
        raise HTTPException(status_code=503, detail="server is not enabled")

    # 深いツリーはpydanticの検証・jsonable_encoderを通さずに直接JSON化する
    body = '{"bucket": %s, "recursive": %s, "root": %s}' % (
        json.dumps(bucket, ensure_ascii=False),
        json.dumps(recursive),
        root.to_json()
    )
    return Response(content=body, media_type="application/json")


@router.post(
    "/buckets/{bucket}/directories",
    tags=["buckets"],
    response_model=DirectoryResponse,
    status_code=201
)
def create_directory(
    bucket: str,
    body: DirectoryCreateRequest,
    storage: StorageHelper = Depends(get_storage_helper)
):
    """ディレクトリ（マーカーオブジェクト）を作成する"""
    name = body.name.strip('/')
    if not name:
        raise HTTPException(status_code=400, detail="directory name must not be empty")
    try:
        storage.create_directory(bucket, name)
    except StorageError as e:
        raise to_http_exception(e, "create_directory")
    return DirectoryResponse(bucket=bucket, name=name)


@router.put(
    "/buckets/{bucket}/files/{file_path:path}",
    tags=["files"],
    response_model=UploadedFileResponse,
    status_code=201
)
async def upload_file(
    bucket: str,
    file_path: str,
    request: Request,
    storage: StorageHelper = Depends(get_storage_helper)
):
    """
    リクエストボディをそのままファイルとしてアップロードする

    Content-Typeヘッダーがオブジェクトのコンテンツタイプになる。
    """
    directory, file_name = split_file_path(file_path)
    content = await request.body()
    content_type = request.headers.get('content-type', 'application/octet-stream')

    try:
        storage.create_file(bucket, directory, file_name, content, len(content), content_type)
    except StorageError as e:
        raise to_http_exception(e, "upload_file")

    return UploadedFileResponse(
        bucket=bucket,
        key=posixpath.join(directory, file_name),
        size=len(content),
        content_type=content_type
    )


@router.get("/buckets/{bucket}/files/{file_path:path}", tags=["files"])
def download_file(
    bucket: str,
    file_path: str,
    storage: StorageHelper = Depends(get_storage_helper)
):
    """ファイルをストリーミングで返す（存在しない場合は404）"""
    directory, file_name = split_file_path(file_path)
    try:
        obj = storage.get_file(bucket, directory, file_name)
    except StorageError as e:
        raise to_http_exception(e, "download_file")

    if obj is None:
        raise HTTPException(status_code=404, detail="File not found")

    def stream():
        with obj:
            yield from obj.iter_chunks()

    return StreamingResponse(
        stream(),
        media_type=obj.content_type,
        headers={
            'Content-Length': str(obj.content_length),
            'Content-Disposition': content_disposition(file_name)
        }
    )


@router.get(
    "/buckets/{bucket}/files-exists/{file_path:path}",
    tags=["files"],
    response_model=FileExistsResponse
)
def file_exists(
    bucket: str,
    file_path: str,
    storage: StorageHelper = Depends(get_storage_helper)
):
    """ファイルが存在するか確認する"""
    directory, file_name = split_file_path(file_path)
    try:
        exists = storage.file_exists(bucket, directory, file_name)
    except StorageError as e:
        raise to_http_exception(e, "file_exists")
    return FileExistsResponse(bucket=bucket, key=posixpath.join(directory, file_name), exists=exists)
