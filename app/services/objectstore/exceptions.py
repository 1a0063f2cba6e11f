"""カスタム例外

オブジェクトストレージ関連のエラーを表す例外クラス。
"""


class StorageError(Exception):
    """ストレージ操作の基底例外"""
    pass


class StorageConfigError(StorageError):
    """設定エラー（バリデーション失敗、クライアント生成失敗）"""
    pass


class BackendNotRegisteredError(StorageConfigError):
    """バックエンドが未登録"""
    pass


class StorageAccessError(StorageError):
    """ストレージアクセスエラー"""
    pass


class ListingError(StorageAccessError):
    """オブジェクト一覧取得中のエラー（ツリー構築は中断される）"""
    pass


class StorageDisabledError(StorageError):
    """ストレージが無効化されている"""

    def __init__(self, message: str = "server is not enabled"):
        super().__init__(message)


class FolderNotFoundError(StorageError):
    """フォルダツリー内に指定パスが存在しない"""

    def __init__(self, keys):
        self.keys = tuple(keys)
        super().__init__(f"folder not found: {'/'.join(self.keys)}")
