"""Snapshot persistence for the stateful components.

Each key holds one whole serialized value. Entries are wrapped as
``{"value", "timestamp", "expires"}`` and base64-encoded, which hides the
JSON from casual inspection but is NOT encryption.
"""

import base64
import binascii
import json
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

STORAGE_PREFIX = os.getenv("NEXTOMIC_STORAGE_PREFIX", "nextomic_")
DATA_DIR = os.getenv("NEXTOMIC_DATA_DIR", "")


class Storage(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, expires: Optional[float] = None) -> None: ...

    def remove(self, key: str) -> None: ...


def obfuscate(data: Dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")


def deobfuscate(blob: str) -> Optional[Dict[str, Any]]:
    try:
        return json.loads(base64.b64decode(blob.encode("ascii"), validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None


class _EncodedStorage(ABC):
    def __init__(self, prefix: str = STORAGE_PREFIX, clock: Callable[[], float] = time.time):
        self.prefix = prefix
        self._clock = clock

    @abstractmethod
    def _read(self, full_key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def _write(self, full_key: str, blob: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def _delete(self, full_key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def _full_keys(self) -> List[str]:
        raise NotImplementedError

    def set(self, key: str, value: Any, expires: Optional[float] = None) -> None:
        entry = {"value": value, "timestamp": self._clock(), "expires": expires}
        self._write(self.prefix + key, obfuscate(entry))

    def get(self, key: str, default: Any = None) -> Any:
        stored = self._read(self.prefix + key)
        if not stored:
            return default

        entry = deobfuscate(stored)
        if not isinstance(entry, dict) or "value" not in entry:
            logger.warning("Discarding unreadable stored entry %s", key)
            return default

        expires = entry.get("expires")
        if expires is not None and self._clock() > expires:
            logger.info("Stored entry %s expired", key)
            self.remove(key)
            return default

        return entry["value"]

    def remove(self, key: str) -> None:
        self._delete(self.prefix + key)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def keys(self) -> List[str]:
        return [k[len(self.prefix):] for k in self._full_keys() if k.startswith(self.prefix)]

    def clear_all(self) -> None:
        for key in self.keys():
            self.remove(key)


class MemoryStorage(_EncodedStorage):
    def __init__(self, prefix: str = STORAGE_PREFIX, clock: Callable[[], float] = time.time):
        super().__init__(prefix, clock)
        self._items: Dict[str, str] = {}

    def _read(self, full_key: str) -> Optional[str]:
        return self._items.get(full_key)

    def _write(self, full_key: str, blob: str) -> None:
        self._items[full_key] = blob

    def _delete(self, full_key: str) -> None:
        self._items.pop(full_key, None)

    def _full_keys(self) -> List[str]:
        return list(self._items)


class JsonFileStorage(_EncodedStorage):
    """One file per key. Writes go to a temp file in the same directory and
    are renamed into place, so a reader sees either the old or the new blob."""

    def __init__(self, base_dir: str, prefix: str = STORAGE_PREFIX, clock: Callable[[], float] = time.time):
        super().__init__(prefix, clock)
        self.base = Path(base_dir)
        self.base.mkdir(parents=True, exist_ok=True)

    def _path(self, full_key: str) -> Path:
        return self.base / f"{full_key}.json"

    def _read(self, full_key: str) -> Optional[str]:
        path = self._path(full_key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, full_key: str, blob: str) -> None:
        path = self._path(full_key)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.base), suffix=".json.tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            Path(tmp_path).replace(path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def _delete(self, full_key: str) -> None:
        self._path(full_key).unlink(missing_ok=True)

    def _full_keys(self) -> List[str]:
        return [p.stem for p in self.base.glob("*.json")]


def create_storage(data_dir: Optional[str] = None) -> _EncodedStorage:
    data_dir = DATA_DIR if data_dir is None else data_dir
    if data_dir:
        logger.info("Using file storage at %s", data_dir)
        return JsonFileStorage(data_dir)
    return MemoryStorage()
