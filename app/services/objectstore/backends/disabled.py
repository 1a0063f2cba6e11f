"""無効化ストレージバックエンド

ストレージを使わない環境向け。書き込み系はStorageDisabledErrorを送出し、
読み取り系は空の結果を返す。
"""

import logging
from typing import BinaryIO, Iterator, List, Optional, Union

from ..config import S3Config
from ..exceptions import StorageDisabledError
from ..folder import Folder
from ..models import StoredObject
from ..registry import BackendRegistry
from .base import StorageHelper

logger = logging.getLogger(__name__)


@BackendRegistry.register("disabled")
class DisabledStorage(StorageHelper):
    """何もしないストレージヘルパー"""

    enabled = False

    def __init__(self, config: Optional[S3Config] = None, client=None):
        super().__init__(config)
        logger.info("DisabledStorage initialized: object storage is not enabled")

    def create_bucket(self, name: str) -> None:
        raise StorageDisabledError()

    def create_directory(self, bucket: str, name: str) -> None:
        raise StorageDisabledError()

    def create_file(
        self,
        bucket: str,
        directory: str,
        file_name: str,
        content: Union[bytes, BinaryIO],
        length: int,
        mime: str
    ) -> None:
        raise StorageDisabledError()

    def bucket_exists(self, bucket: str) -> bool:
        raise StorageDisabledError()

    def list_buckets(self) -> List[str]:
        return []

    def iter_object_keys(self, bucket: str, prefix: str = '', recursive: bool = True) -> Iterator[str]:
        return iter(())

    def list_bucket_folder(self, bucket_name: str, recursive: bool = False) -> Optional[Folder]:
        return None

    def get_file(self, bucket: str, directory: str, filename: str) -> Optional[StoredObject]:
        return None

    def file_exists(self, bucket: str, directory: str, filename: str) -> bool:
        return False
