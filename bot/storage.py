"""
JSON file storage for bot records.
Keeps everything in one document on disk with a backup of the previous write.
"""

import asyncio
import json
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

from bot.config import config
from utils.logger import get_logger

logger = get_logger("Storage")

T = TypeVar("T")

DATA_FILE_NAME = "bot_data.json"

COLLECTIONS = ("button_messages", "conversations", "reminders", "feedback_messages")


class StorageError(Exception):
    """Raised when the data file cannot be read or written."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def empty_data() -> Dict[str, Any]:
    """A fresh, empty data document."""
    data: Dict[str, Any] = {name: {} for name in COLLECTIONS}
    data["last_updated"] = _now_iso()
    return data


class DataStore:
    """
    Single JSON document holding every collection.

    All mutations go through ``update`` which serializes writers with an
    asyncio lock and saves to disk before releasing it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.backup_path = self.path.with_name(self.path.name + ".backup")
        self._data: Dict[str, Any] = empty_data()
        self._lock = asyncio.Lock()
        self.loaded = False

    def load(self) -> None:
        """
        Load the document from disk.

        A missing file starts an empty document.

        Raises:
            StorageError: If the file exists but is not valid JSON
        """
        if not self.path.exists():
            logger.info(f"No data file at {self.path}, starting fresh")
            self._data = empty_data()
            self.loaded = True
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise StorageError(f"Unexpected data format in {self.path}")

        self._data = self._normalize(raw)
        self.loaded = True
        logger.info(f"Loaded data from {self.path}")

    @staticmethod
    def _normalize(raw: Dict[str, Any]) -> Dict[str, Any]:
        data = empty_data()
        for name in COLLECTIONS:
            value = raw.get(name)
            if isinstance(value, dict):
                data[name] = value
        data["last_updated"] = raw.get("last_updated") or data["last_updated"]
        return data

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if self.path.exists():
            shutil.copy2(self.path, self.backup_path)

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)

    def _serialize(self) -> str:
        self._data["last_updated"] = _now_iso()
        return json.dumps(self._data, indent=2, ensure_ascii=False)

    async def save(self) -> None:
        """Write the current document to disk."""
        async with self._lock:
            await self._save_locked()

    async def _save_locked(self) -> None:
        payload = self._serialize()
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    async def update(self, mutator: Callable[[Dict[str, Any]], T]) -> T:
        """
        Apply a change to the document and save it.

        Args:
            mutator: Function receiving the live document; its return value is passed back

        Returns:
            Whatever the mutator returned
        """
        async with self._lock:
            result = mutator(self._data)
            await self._save_locked()
            return result

    def collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        """
        Get a collection for reading.

        Args:
            name: Collection name

        Returns:
            The live collection dict (mutate only through ``update``)
        """
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        return self._data[name]

    @property
    def last_updated(self) -> datetime:
        return datetime.fromisoformat(self._data["last_updated"])

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the whole document."""
        return json.loads(json.dumps(self._data))

    def get_stats(self) -> Dict[str, Any]:
        """
        Summarize stored records.

        Returns:
            Dict with button_messages_count, conversations_count,
            total_messages, reminders_count, feedback_count and last_updated
        """
        conversations = self._data["conversations"]
        return {
            "button_messages_count": len(self._data["button_messages"]),
            "conversations_count": len(conversations),
            "total_messages": sum(len(c.get("messages", [])) for c in conversations.values()),
            "reminders_count": len(self._data["reminders"]),
            "feedback_count": len(self._data["feedback_messages"]),
            "last_updated": self.last_updated,
        }

    async def migrate_if_needed(self) -> int:
        """
        Fill in missing conversation user names.

        Returns:
            Number of records changed
        """
        def mutate(data: Dict[str, Any]) -> int:
            changed = 0
            for user_id, context in data["conversations"].items():
                if not context.get("user_name"):
                    context["user_name"] = f"User_{user_id[:8]}"
                    changed += 1
                context.setdefault("user_id", user_id)
            return changed

        needs_migration = any(
            not context.get("user_name") for context in self._data["conversations"].values()
        )
        if not needs_migration:
            return 0

        changed = await self.update(mutate)
        logger.info(f"Migrated {changed} conversation records")
        return changed

    async def export_to_file(self, path: Path) -> None:
        """Write a copy of the document to another file."""
        async with self._lock:
            payload = json.dumps(self._data, indent=2, ensure_ascii=False)
        target = Path(path)
        await asyncio.to_thread(target.write_text, payload, "utf-8")
        logger.info(f"Exported data to {target}")

    async def import_from_file(self, path: Path) -> None:
        """
        Replace the document with the contents of another file.

        Raises:
            StorageError: If the file cannot be parsed
        """
        source = Path(path)
        try:
            raw = json.loads(await asyncio.to_thread(source.read_text, "utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to import {source}: {e}") from e
        if not isinstance(raw, dict):
            raise StorageError(f"Unexpected data format in {source}")

        normalized = self._normalize(raw)

        def replace(data: Dict[str, Any]) -> None:
            data.clear()
            data.update(normalized)

        await self.update(replace)
        logger.info(f"Imported data from {source}")


_store: Optional[DataStore] = None


async def init_storage(data_dir: Optional[str] = None) -> DataStore:
    """Load the data store and make it the global instance."""
    global _store

    directory = Path(data_dir or config.DATA_DIR)
    store = DataStore(directory / DATA_FILE_NAME)
    await asyncio.to_thread(store.load)
    await store.migrate_if_needed()

    _store = store
    stats = store.get_stats()
    logger.info(
        f"Storage ready: {stats['conversations_count']} conversations, "
        f"{stats['reminders_count']} reminders, {stats['button_messages_count']} button messages"
    )
    return store


async def close_storage() -> None:
    """Flush and release the data store."""
    global _store

    if _store:
        await _store.save()
        _store = None
        logger.info("Storage closed")


def is_connected() -> bool:
    """Check if the data store is loaded."""
    return _store is not None and _store.loaded


def get_store() -> DataStore:
    """Get the loaded data store."""
    if _store is None:
        raise StorageError("Storage not initialized")
    return _store
