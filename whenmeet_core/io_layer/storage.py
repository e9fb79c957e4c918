# whenmeet_core/io_layer/storage.py
"""
保存先はアプリのルート（CLI/GUI）で明示的に生成し、必要なクラスへ渡す。
モジュール変数に保存先を隠し持たない。
"""
from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from whenmeet_core.config import DEFAULT_CONFIG, StorageConfig
from whenmeet_core.domain.grid import Grid
from whenmeet_core.logging import get_logger
from whenmeet_core.validation.validator import ShapeMismatch

log = get_logger(__name__)


class KeyValueStore:
    """JSON化できる値を文字列キーで保存する最小インタフェース"""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def keys(self, prefix: str = "") -> List[str]:
        raise NotImplementedError


@dataclass
class MemoryStore(KeyValueStore):
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Optional[Any]:
        # 呼び出し側が書き換えても保存内容に影響しないようにコピーを返す
        v = self.data.get(key)
        return json.loads(json.dumps(v)) if v is not None else None

    def set(self, key: str, value: Any) -> None:
        self.data[key] = json.loads(json.dumps(value))

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self.data if k.startswith(prefix))


class JsonFileStore(KeyValueStore):
    """1つのJSONファイルに全キーを持つ。書き込みは一時ファイル経由で置き換える。"""

    def __init__(self, path: str):
        self.path = Path(path)
        # 読み込み→変更→書き出しを1つにまとめる（GUIはセッション間で同じインスタンスを使う）
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"保存ファイルの形式が不正です: {self.path}")
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._load() if k.startswith(prefix))


class ScheduleRepository:
    def __init__(self, store: KeyValueStore, cfg: StorageConfig = DEFAULT_CONFIG.storage):
        self.store = store
        self.prefix = cfg.schedule_key_prefix

    def _key(self, user_id: int) -> str:
        return f"{self.prefix}{user_id}"

    def save_schedule(self, user_id: int, grid: Grid) -> None:
        self.store.set(self._key(user_id), grid.to_rows())
        log.info("schedule_saved", user_id=user_id, busy_cells=grid.busy_cell_count())

    def load_schedule(self, user_id: int) -> Optional[Grid]:
        """検証済みの Grid か、無ければ None（形の壊れたデータも None 扱い）"""
        raw = self.store.get(self._key(user_id))
        if raw is None:
            return None
        try:
            return Grid.from_rows(raw)
        except ShapeMismatch as e:
            log.warning("stored_schedule_malformed", user_id=user_id, reason=e.message)
            return None

    def delete_schedule(self, user_id: int) -> None:
        self.store.delete(self._key(user_id))
        log.info("schedule_deleted", user_id=user_id)

    def list_saved_user_ids(self) -> List[int]:
        ids = []
        for k in self.store.keys(self.prefix):
            suffix = k[len(self.prefix):]
            if suffix.isdigit():
                ids.append(int(suffix))
        return sorted(ids)
