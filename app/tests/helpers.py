"""テスト用ヘルパー"""

from botocore.exceptions import ClientError


def make_client_error(code: str, operation: str = 'Operation') -> ClientError:
    """指定コードのClientErrorを生成する"""
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


def set_listing(mock_client, pages):
    """list_objects_v2ページネーターの戻り値を設定する"""
    mock_client.get_paginator.return_value.paginate.return_value = pages
