"""FastAPI依存関係

アプリケーションに保持されたストレージヘルパーを各エンドポイントへ渡す。
"""

import logging
from fastapi import HTTPException, Request

from services.objectstore import StorageError, StorageHelper, create_storage

logger = logging.getLogger(__name__)


def get_storage_helper(request: Request) -> StorageHelper:
    """app.state.storageを返す（未設定なら環境変数から生成して保持）"""
    storage = getattr(request.app.state, 'storage', None)
    if storage is None:
        try:
            storage = create_storage()
        except StorageError as e:
            logger.error(f"Failed to create storage helper: {e}")
            raise HTTPException(status_code=500, detail="Storage is misconfigured")
        request.app.state.storage = storage
    return storage
