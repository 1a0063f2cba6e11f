"""ストレージモードとヘルパークラスの対応表

STORAGE_MODEの値（'s3' / 'disabled'）から生成すべきStorageHelperを引く。
"""

from typing import Dict, List, Type, TYPE_CHECKING

from .exceptions import BackendNotRegisteredError

if TYPE_CHECKING:
    from .backends.base import StorageHelper


class BackendRegistry:
    """モード名 → StorageHelper実装クラス"""

    _backends: Dict[str, Type['StorageHelper']] = {}

    @classmethod
    def register(cls, mode: str):
        """ヘルパークラスにモード名を割り当てるクラスデコレータ（大文字小文字は区別しない）"""
        def decorator(helper_class: Type['StorageHelper']):
            cls._backends[mode.lower()] = helper_class
            return helper_class
        return decorator

    @classmethod
    def get(cls, mode: str) -> Type['StorageHelper']:
        """
        Raises:
            BackendNotRegisteredError: 対応するヘルパーがないモード
        """
        helper_class = cls._backends.get(mode.lower())
        if helper_class is None:
            raise BackendNotRegisteredError(
                f"Unknown storage mode: {mode}. Available: {', '.join(cls._backends)}"
            )
        return helper_class

    @classmethod
    def list_modes(cls) -> List[str]:
        return list(cls._backends)

    @classmethod
    def is_registered(cls, mode: str) -> bool:
        return mode.lower() in cls._backends
