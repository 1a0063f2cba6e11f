"""フォルダツリー

フラットなオブジェクトキー一覧から階層構造を復元する。
オブジェクトストレージ自体はキー・バリュー形式のため、
ディレクトリ階層はクライアント側で組み立てる。
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import FolderNotFoundError, ListingError

SEPARATOR = '/'


@dataclass
class Folder:
    """フォルダノード（name は表示名、folders はパス要素→子ノード）"""
    name: str
    folders: Dict[str, 'Folder'] = field(default_factory=dict)

    def add(self, key: str, name: str) -> 'Folder':
        """直下に子フォルダを追加する（同じキーがあれば上書き）"""
        child = Folder(name=name)
        self.folders[key] = child
        return child

    def ensure(self, key: str) -> 'Folder':
        """直下の子フォルダを取得し、なければ作成する"""
        child = self.folders.get(key)
        if child is None:
            child = self.add(key, key)
        return child

    def get(self, *keys: str) -> Optional['Folder']:
        """
        キーを順にたどってフォルダを取得する

        Args:
            *keys: パス要素

        Returns:
            Optional[Folder]: 見つかったフォルダ、途中で欠けていればNone
        """
        node = self
        for key in keys:
            node = node.folders.get(key)
            if node is None:
                return None
        return node

    def set(self, name: str, *keys: str) -> None:
        """
        指定パスのフォルダの表示名を変更する

        Raises:
            FolderNotFoundError: パスが存在しない場合
        """
        node = self.get(*keys)
        if node is None:
            raise FolderNotFoundError(keys)
        node.name = name

    def insert(self, key: str) -> 'Folder':
        """オブジェクトキーの各階層を（なければ）作成し、末端ノードを返す"""
        node = self
        for segment in split_key(key):
            node = node.ensure(segment)
        return node

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式に変換（階層が深くても再帰しない）"""
        result = {"name": self.name, "folders": {}}
        stack = [(self, result)]
        while stack:
            node, out = stack.pop()
            for key, child in node.folders.items():
                child_out = {"name": child.name, "folders": {}}
                out["folders"][key] = child_out
                stack.append((child, child_out))
        return result

    def to_json(self) -> str:
        """
        JSON文字列に変換する

        ネストを再帰せずにトークンのスタックで組み立てる（キーは最大約512階層）。
        """
        parts = []
        stack: List[Union[str, Folder]] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue
            parts.append('{"name": ' + json.dumps(item.name, ensure_ascii=False) + ', "folders": {')
            stack.append('}}')
            children = list(item.folders.items())
            for index in range(len(children) - 1, -1, -1):
                key, child = children[index]
                stack.append(child)
                stack.append((', ' if index else '') + json.dumps(key, ensure_ascii=False) + ': ')
        return ''.join(parts)


def split_key(key: str):
    """キーをパス要素に分割（空要素は除外）"""
    return [segment for segment in key.split(SEPARATOR) if segment]


def build_folder_tree(root_label: str, keys: Iterable[str]) -> Folder:
    """
    オブジェクトキー一覧からフォルダツリーを構築する

    キーの順序は問わない。同じプレフィックスが再登場した場合は既存ノードを再利用する。

    Args:
        root_label: ルートノードの名前（通常はバケット名）
        keys: '/'区切りのオブジェクトキー（遅延評価のイテレータ可）

    Returns:
        Folder: ルートノード

    Raises:
        ListingError: キー一覧の取得中にエラーが発生した場合
    """
    root = Folder(name=root_label)
    iterator = iter(keys)
    while True:
        # 一覧ストリームの進行中に発生したエラーのみListingErrorとする
        try:
            key = next(iterator)
        except StopIteration:
            break
        except Exception as e:
            raise ListingError("list object error") from e
        root.insert(key)
    return root
