from .base import StorageHelper
from .s3 import ActiveStorage
from .disabled import DisabledStorage

__all__ = ['StorageHelper', 'ActiveStorage', 'DisabledStorage']
