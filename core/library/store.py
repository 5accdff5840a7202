"""
鍵值儲存

作用：
- 定義資料庫所需的鍵值儲存介面（get / set / remove / list_keys）
- 記憶體實作（可模擬容量上限）
- 目錄實作：每個鍵一個 JSON 檔
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """同步、可能失敗的鍵值儲存"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """讀取值，不存在回傳 None"""

    @abstractmethod
    def set(self, key: str, value: str):
        """寫入值，失敗時拋出 StorageError"""

    @abstractmethod
    def remove(self, key: str):
        """刪除鍵（不存在時不動作）"""

    @abstractmethod
    def list_keys(self, prefix: str = '') -> List[str]:
        """列出以 prefix 開頭的鍵"""


class MemoryStore(KeyValueStore):
    """記憶體鍵值儲存"""

    def __init__(self, quota_bytes: Optional[int] = None):
        # 資料
        self._data: Dict[str, str] = {}
        # 容量上限（位元組），None 為不限
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        if not isinstance(value, str):
            raise StorageError(f'Value for {key} must be a string')
        if self.quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self.quota_bytes:
                raise StorageError(f'Quota exceeded while writing {key}')
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)

    def list_keys(self, prefix: str = '') -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]


class JsonDirectoryStore(KeyValueStore):
    """目錄鍵值儲存：每個鍵存成 <目錄>/<鍵>.json"""

    suffix = '.json'

    def __init__(self, directory):
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f'Cannot create store directory {self.directory}: {e}') from e

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{self.suffix}"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f'Cannot read {key}: {e}') from e

    def set(self, key: str, value: str):
        path = self._path_for(key)
        temp_path = path.with_name(path.name + '.tmp')
        try:
            temp_path.write_text(value, encoding='utf-8')
            os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f'Cannot write {key}: {e}') from e

    def remove(self, key: str):
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f'Cannot remove {key}: {e}') from e

    def list_keys(self, prefix: str = '') -> List[str]:
        keys = []
        for path in sorted(self.directory.glob(f'*{self.suffix}')):
            key = unquote(path.name[: -len(self.suffix)])
            if key.startswith(prefix):
                keys.append(key)
        return keys
