"""S3ストレージバックエンド（有効時）

AWS S3およびS3互換ストレージ（MinIO等）に対応。
"""

import logging
from contextlib import closing
from datetime import datetime
from typing import BinaryIO, Iterator, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import S3Config
from ..exceptions import ListingError, StorageAccessError, StorageConfigError
from ..folder import Folder, build_folder_tree
from ..models import StoredObject
from ..registry import BackendRegistry
from .base import StorageHelper, object_key

logger = logging.getLogger(__name__)

# バケット作成時にLocationConstraintを指定できないリージョン
DEFAULT_REGION = 'us-east-1'
DIRECTORY_MARKER = '.created'


def _error_code(e: ClientError) -> str:
    return e.response.get('Error', {}).get('Code', '')


@BackendRegistry.register("s3")
class ActiveStorage(StorageHelper):
    """S3互換ストレージに接続するヘルパー"""

    enabled = True

    def __init__(self, config: S3Config, client=None):
        """
        設定を検証し、S3クライアントを初期化する

        Args:
            config: S3設定
            client: 注入するboto3クライアント。Noneの場合は設定から生成

        Raises:
            StorageConfigError: 設定不備、またはクライアント生成失敗
        """
        try:
            config.validate()
        except StorageConfigError as e:
            raise StorageConfigError(f"New Validator: {e}") from e
        super().__init__(config)

        if client is None:
            try:
                client = boto3.client(
                    's3',
                    endpoint_url=config.endpoint_url,
                    aws_access_key_id=config.access_key_id,
                    aws_secret_access_key=config.secret_access_key,
                    region_name=config.region,
                    use_ssl=config.ssl
                )
            except (ValueError, BotoCoreError) as e:
                raise StorageConfigError(f"New client error: {e}") from e

        self.client = client
        logger.info(f"ActiveStorage initialized: endpoint={config.endpoint}, bucket={config.bucket_name}")

    # --- 書き込み系 ---

    def create_bucket(self, name: str) -> None:
        params = {'Bucket': name}
        if self.config.region != DEFAULT_REGION:
            params['CreateBucketConfiguration'] = {'LocationConstraint': self.config.region}
        try:
            self.client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 create_bucket failed: {name} - {e}")
            raise StorageAccessError("create bucket error") from e
        logger.info(f"Created bucket: {name}")

    def create_directory(self, bucket: str, name: str) -> None:
        body = str(datetime.now()).encode('utf-8')
        key = object_key(name, DIRECTORY_MARKER)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentLength=len(body),
                ContentType='text/plain'
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 create_directory failed: {bucket}/{name} - {e}")
            raise StorageAccessError("create directory error") from e
        logger.info(f"Created directory: {bucket}/{name}")

    def create_file(
        self,
        bucket: str,
        directory: str,
        file_name: str,
        content: Union[bytes, BinaryIO],
        length: int,
        mime: str
    ) -> None:
        key = object_key(directory, file_name)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=content,
                ContentLength=length,
                ContentType=mime
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed: {bucket}/{key} - {e}")
            raise StorageAccessError("create file error") from e
        logger.debug(f"S3 upload success: {bucket}/{key}")

    # --- 読み取り系 ---

    def bucket_exists(self, bucket: str) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket)
            return True
        except ClientError as e:
            if _error_code(e) in ('404', 'NoSuchBucket'):
                return False
            logger.error(f"S3 head_bucket failed: {bucket} - {e}")
            raise StorageAccessError("BucketExists failed") from e
        except BotoCoreError as e:
            logger.error(f"S3 head_bucket failed: {bucket} - {e}")
            raise StorageAccessError("BucketExists failed") from e

    def list_buckets(self) -> List[str]:
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 list_buckets failed: {e}")
            raise StorageAccessError("list failed") from e
        return [bucket['Name'] for bucket in response.get('Buckets', [])]

    def iter_object_keys(self, bucket: str, prefix: str = '', recursive: bool = True) -> Iterator[str]:
        params = {'Bucket': bucket, 'Prefix': prefix}
        if not recursive:
            params['Delimiter'] = '/'

        paginator = self.client.get_paginator('list_objects_v2')
        for page in paginator.paginate(**params):
            for obj in page.get('Contents', []):
                yield obj['Key']
            for common_prefix in page.get('CommonPrefixes', []):
                yield common_prefix['Prefix']

    def list_bucket_folder(self, bucket_name: str, recursive: bool = False) -> Optional[Folder]:
        with closing(self.iter_object_keys(bucket_name, recursive=recursive)) as keys:
            try:
                return build_folder_tree(bucket_name, keys)
            except ListingError as e:
                logger.error(f"S3 list_objects_v2 failed: {bucket_name} - {e.__cause__}")
                raise

    def get_file(self, bucket: str, directory: str, filename: str) -> Optional[StoredObject]:
        key = object_key(directory, filename)
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in ('NoSuchKey', '404'):
                logger.debug(f"S3 object not found: {bucket}/{key}")
                return None
            logger.error(f"S3 get_object failed: {bucket}/{key} - {e}")
            raise StorageAccessError("get object error") from e
        except BotoCoreError as e:
            logger.error(f"S3 get_object failed: {bucket}/{key} - {e}")
            raise StorageAccessError("get object error") from e

        return StoredObject(
            key=key,
            body=response['Body'],
            content_length=response.get('ContentLength', 0),
            content_type=response.get('ContentType', 'application/octet-stream'),
            last_modified=response.get('LastModified')
        )

    def file_exists(self, bucket: str, directory: str, filename: str) -> bool:
        key = object_key(directory, filename)
        try:
            self.client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if _error_code(e) in ('404', 'NoSuchKey', 'NotFound'):
                return False
            logger.error(f"S3 head_object failed: {bucket}/{key} - {e}")
            raise StorageAccessError("head object error") from e
        except BotoCoreError as e:
            logger.error(f"S3 head_object failed: {bucket}/{key} - {e}")
            raise StorageAccessError("head object error") from e
