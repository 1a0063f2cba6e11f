"""ストレージヘルパー生成

設定のモードに応じて有効/無効のヘルパーを生成する。
生成したヘルパーは呼び出し側が保持し、各処理へ明示的に渡す。
"""

import logging
from typing import Optional

from .config import StorageConfig
from .registry import BackendRegistry
from .backends.base import StorageHelper

logger = logging.getLogger(__name__)


def create_storage(config: Optional[StorageConfig] = None, client=None) -> StorageHelper:
    """
    ストレージヘルパーを生成する

    環境変数STORAGE_MODEでバックエンドを切り替え:
    - 's3': S3互換ストレージ（デフォルト）
    - 'disabled': ストレージ無効

    Args:
        config: ストレージ設定。Noneの場合は環境変数から読み込み
        client: 注入するboto3クライアント（テスト用）

    Returns:
        StorageHelper: ヘルパーインスタンス

    Raises:
        BackendNotRegisteredError: 未登録のモードが指定された場合
        StorageConfigError: S3設定が不正な場合
    """
    config = config or StorageConfig.from_env()
    backend_class = BackendRegistry.get(config.mode)
    helper = backend_class(config.get_backend_config(), client=client)
    logger.info(f"Storage helper created: mode={config.mode}")
    return helper
