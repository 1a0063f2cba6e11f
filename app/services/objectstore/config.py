"""ストレージ設定クラス

環境変数からの設定読み込みとバリデーションを一元管理。
"""

from dataclasses import dataclass, field
from typing import Optional
import os

from .exceptions import StorageConfigError


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


@dataclass
class S3Config:
    """S3互換ストレージ接続設定"""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""
    ssl: bool = False
    bucket_name: str = ""

    # 必須項目（sslは任意）
    REQUIRED_FIELDS = ('endpoint', 'access_key_id', 'secret_access_key', 'region', 'bucket_name')

    @classmethod
    def from_env(cls) -> 'S3Config':
        """環境変数から設定を読み込み"""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT', ''),
            access_key_id=os.getenv('AWS_ACCESS_KEY_ID', ''),
            secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY', ''),
            region=os.getenv('AWS_DEFAULT_REGION', ''),
            ssl=_env_bool('S3_USE_SSL'),
            bucket_name=os.getenv('S3_BUCKET_NAME', '')
        )

    def validate(self) -> None:
        """
        必須項目が設定されているか検証する

        Raises:
            StorageConfigError: 空の必須項目がある場合（全項目をまとめて報告）
        """
        errors = [
            f"{name}: cannot be blank"
            for name in self.REQUIRED_FIELDS
            if not (getattr(self, name) or "").strip()
        ]
        if errors:
            raise StorageConfigError("; ".join(errors))

    @property
    def endpoint_url(self) -> str:
        """スキーム付きエンドポイントURL（boto3用）"""
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.endpoint}"


@dataclass
class StorageConfig:
    """統合ストレージ設定"""
    mode: str = "s3"
    s3: S3Config = field(default_factory=S3Config)

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """環境変数から設定を読み込み"""
        return cls(
            mode=os.getenv('STORAGE_MODE', 's3').lower(),
            s3=S3Config.from_env()
        )

    def get_backend_config(self) -> Optional[S3Config]:
        """現在のモードに対応するバックエンド設定を取得"""
        # disabledモードでもホスト名・バケット名の参照用に渡す
        return self.s3
