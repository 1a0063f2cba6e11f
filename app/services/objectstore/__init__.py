"""Object Storage Module

S3互換オブジェクトストレージの薄い抽象化レイヤー。
バケット作成、ディレクトリ（マーカーオブジェクト）作成、ファイルのアップロード/取得、
存在確認、キー一覧からのフォルダツリー復元を提供する。
"""

from .config import StorageConfig, S3Config
from .exceptions import (
    StorageError,
    StorageConfigError,
    BackendNotRegisteredError,
    StorageAccessError,
    ListingError,
    StorageDisabledError,
    FolderNotFoundError
)
from .folder import Folder, build_folder_tree
from .models import StoredObject
from .registry import BackendRegistry
from .backends import StorageHelper, ActiveStorage, DisabledStorage
from .service import create_storage

__all__ = [
    'StorageConfig',
    'S3Config',
    'StorageError',
    'StorageConfigError',
    'BackendNotRegisteredError',
    'StorageAccessError',
    'ListingError',
    'StorageDisabledError',
    'FolderNotFoundError',
    'Folder',
    'build_folder_tree',
    'StoredObject',
    'BackendRegistry',
    'StorageHelper',
    'ActiveStorage',
    'DisabledStorage',
    'create_storage'
]

__version__ = '1.0.0'
