"""テスト共通フィクスチャ"""

import pytest
from unittest.mock import MagicMock

from services.objectstore import S3Config, ActiveStorage


@pytest.fixture
def s3_config():
    """有効なS3設定"""
    return S3Config(
        endpoint="localhost:9000",
        access_key_id="x",
        secret_access_key="x",
        region="ap-northeast-1",
        ssl=False,
        bucket_name="artifacts"
    )


@pytest.fixture
def mock_client():
    """boto3 S3クライアントのモック"""
    return MagicMock()


@pytest.fixture
def active_storage(s3_config, mock_client):
    """モッククライアントを注入したActiveStorage"""
    return ActiveStorage(s3_config, client=mock_client)
