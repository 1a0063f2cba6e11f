"""ストレージ操作の戻り値モデル"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass
class StoredObject:
    """get_objectで取得したオブジェクト（bodyは読み出し後にclose()すること）"""
    key: str
    body: Any  # botocore StreamingBody
    content_length: int
    content_type: str = 'application/octet-stream'
    last_modified: Optional[datetime] = None

    def read(self, amt: Optional[int] = None) -> bytes:
        return self.body.read(amt)

    def iter_chunks(self, chunk_size: int = 65536):
        """本文をチャンク単位で読み出す"""
        while True:
            chunk = self.body.read(chunk_size)
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        self.body.close()

    def __enter__(self) -> 'StoredObject':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
