"""ストレージヘルパー抽象基底クラス

有効（S3互換ストレージに接続）/無効（何もしない）の2実装が共有するインターフェース。
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, List, Optional, Union

from ..config import S3Config
from ..folder import Folder
from ..models import StoredObject


class StorageHelper(ABC):
    """オブジェクトストレージ操作の抽象基底クラス"""

    enabled: bool = False

    def __init__(self, config: Optional[S3Config] = None):
        self.config = config

    # --- 書き込み系メソッド（Write Operations） ---

    @abstractmethod
    def create_bucket(self, name: str) -> None:
        """
        バケットを作成する

        Args:
            name: バケット名
        """
        pass

    @abstractmethod
    def create_directory(self, bucket: str, name: str) -> None:
        """
        バケット内にディレクトリを作成する

        オブジェクトストレージにはディレクトリの概念がないため、
        "<name>/.created" というマーカーオブジェクトを配置する。

        Args:
            bucket: バケット名
            name: ディレクトリ名
        """
        pass

    @abstractmethod
    def create_file(
        self,
        bucket: str,
        directory: str,
        file_name: str,
        content: Union[bytes, BinaryIO],
        length: int,
        mime: str
    ) -> None:
        """
        ディレクトリ内にファイルをアップロードする

        Args:
            bucket: バケット名
            directory: ディレクトリ（空文字ならバケット直下）
            file_name: ファイル名
            content: ファイル内容（バイト列またはファイルライクオブジェクト）
            length: バイト数
            mime: コンテンツタイプ
        """
        pass

    # --- 読み取り系メソッド（Read Operations） ---

    @abstractmethod
    def bucket_exists(self, bucket: str) -> bool:
        """バケットが存在するか確認する"""
        pass

    @abstractmethod
    def list_buckets(self) -> List[str]:
        """バケット名一覧を取得する"""
        pass

    @abstractmethod
    def iter_object_keys(self, bucket: str, prefix: str = '', recursive: bool = True) -> Iterator[str]:
        """
        オブジェクトキーを遅延評価で列挙する

        Args:
            bucket: バケット名
            prefix: プレフィックス
            recursive: Falseの場合は直下のキーと共通プレフィックスのみ

        Yields:
            str: オブジェクトキー
        """
        pass

    @abstractmethod
    def list_bucket_folder(self, bucket_name: str, recursive: bool = False) -> Optional[Folder]:
        """バケット内のフォルダツリーを取得する"""
        pass

    @abstractmethod
    def get_file(self, bucket: str, directory: str, filename: str) -> Optional[StoredObject]:
        """
        ファイルを取得する

        Returns:
            Optional[StoredObject]: 存在しない場合はNone
        """
        pass

    @abstractmethod
    def file_exists(self, bucket: str, directory: str, filename: str) -> bool:
        """ファイルが存在するか確認する（本文は取得しない）"""
        pass

    # --- 設定値 ---

    def get_s3_host(self) -> str:
        """接続先ホストを取得"""
        return self.config.endpoint if self.config else ""

    def get_bucket_name(self) -> str:
        """既定のバケット名を取得"""
        return self.config.bucket_name if self.config else ""


def object_key(directory: str, name: str) -> str:
    """ディレクトリとファイル名からオブジェクトキーを組み立てる"""
    parts = [p.strip('/') for p in (directory, name) if p and p.strip('/')]
    return '/'.join(parts)
