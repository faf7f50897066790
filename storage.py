from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Protocol

from exceptions import StorageError

logger = logging.getLogger("library.storage")

DEFAULT_STORAGE_KEY = "LIB_DATA"

State = Dict[str, List[Dict[str, Any]]]


def empty_state() -> State:
    return {"books": [], "members": []}


def _normalize(blob: Any) -> State:
    state = empty_state()
    if isinstance(blob, dict):
        for name in state:
            items = blob.get(name)
            if not isinstance(items, list):
                continue
            kept = [dict(i) for i in items if isinstance(i, dict) and i.get("id")]
            if len(kept) != len(items):
                logger.warning(
                    "Dropped malformed records | collection=%s dropped=%d",
                    name, len(items) - len(kept),
                )
            state[name] = kept
    return state


class LibraryStore(Protocol):
    def load(self) -> State:
        ...

    def save(self, state: State) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryStore:
    """Keeps the library blob in process memory."""

    def __init__(self, state: State | None = None) -> None:
        self._state = _normalize(state)

    def load(self) -> State:
        return copy.deepcopy(self._state)

    def save(self, state: State) -> None:
        self._state = _normalize(copy.deepcopy(state))

    def clear(self) -> None:
        self._state = empty_state()


class JsonFileStore:
    """
    Key/value JSON file holding one library blob per storage key.

    File layout:
        {"LIB_DATA": {"books": [...], "members": [...]}, ...}

    - A missing file or key loads as an empty library.
    - Unreadable or malformed JSON is logged and treated as empty.
    - Writes go through a temp file and os.replace, so the file is never
      left half-written.
    """

    def __init__(self, path: str | Path, key: str = DEFAULT_STORAGE_KEY) -> None:
        if not key:
            raise ValueError("storage key cannot be empty")
        self.path = Path(path)
        self.key = key

    def load(self) -> State:
        return _normalize(self._read_all().get(self.key))

    def save(self, state: State) -> None:
        data = self._read_all()
        data[self.key] = _normalize(state)
        self._write_all(data)
        logger.debug("Saved library data | path=%s key=%s", self.path, self.key)

    def clear(self) -> None:
        data = self._read_all()
        if self.key not in data:
            return
        del data[self.key]
        if data:
            self._write_all(data)
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.exception("Cannot remove data file | %s", e)
            raise StorageError(f"Cannot remove data file: {self.path}") from e
        logger.info("Cleared library data | path=%s key=%s", self.path, self.key)

    def _read_all(self) -> Dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Cannot read data file, starting empty | %s", e)
            return {}

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Malformed data file, starting empty | path=%s error=%s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Unexpected data file layout, starting empty | path=%s", self.path)
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.exception("Cannot write data file | %s", e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write data file: {self.path}") from e
