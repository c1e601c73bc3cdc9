"""
Base Repository
Generic repository pattern over the JSON data store
Provides common CRUD operations on one collection
"""

from abc import ABC
from typing import Any, Dict, List, Optional

from bot.storage import DataStore
from utils.logger import get_logger


class BaseRepository(ABC):
    """
    Base repository class for one collection of the data store.

    This is an abstract base class - do not instantiate directly.
    Subclasses should provide collection and primary_key.
    """

    def __init__(
        self,
        store: DataStore,
        collection: str,
        primary_key: str = "id"
    ):
        """
        Create a new repository instance.

        Args:
            store: Loaded data store
            collection: Collection name inside the document
            primary_key: Field holding the record key
        """
        if self.__class__ == BaseRepository:
            raise TypeError("Cannot instantiate abstract BaseRepository directly")

        self.store = store
        self.collection = collection
        self.primary_key = primary_key
        self.logger = get_logger(self.__class__.__name__)

    def _records(self) -> Dict[str, Dict[str, Any]]:
        return self.store.collection(self.collection)

    @staticmethod
    def _matches(record: Dict[str, Any], conditions: Dict[str, Any]) -> bool:
        return all(record.get(key) == value for key, value in conditions.items())

    async def find_by_id(self, id: Any) -> Optional[Dict[str, Any]]:
        """
        Find a single record by primary key.

        Args:
            id: Primary key value

        Returns:
            Copy of the record or None
        """
        record = self._records().get(str(id))
        return dict(record) if record is not None else None

    async def find_where(
        self,
        conditions: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Find records by conditions.

        Args:
            conditions: Key-value equality conditions
            options: Query options (limit, offset, order_by, order)

        Returns:
            List of record copies
        """
        conditions = conditions or {}
        options = options or {}

        rows = [
            dict(record)
            for record in self._records().values()
            if self._matches(record, conditions)
        ]

        if options.get("order_by"):
            key = options["order_by"]
            reverse = str(options.get("order", "ASC")).upper() == "DESC"
            rows.sort(key=lambda r: (r.get(key) is None, r.get(key)), reverse=reverse)

        offset = options.get("offset") or 0
        if offset:
            rows = rows[offset:]

        if options.get("limit"):
            rows = rows[: options["limit"]]

        return rows

    async def find_all(
        self,
        options: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Find all records.

        Args:
            options: Query options

        Returns:
            List of record copies
        """
        return await self.find_where({}, options)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new record.

        Args:
            data: Record data (must include the primary key)

        Returns:
            Created record

        Raises:
            ValueError: If the key is missing or already used
        """
        key = data.get(self.primary_key)
        if key in (None, ""):
            raise ValueError(f"{self.collection} record requires '{self.primary_key}'")
        key = str(key)

        def mutate(document: Dict[str, Any]) -> Dict[str, Any]:
            records = document[self.collection]
            if key in records:
                raise ValueError(f"{self.collection} record {key} already exists")
            records[key] = dict(data)
            return dict(records[key])

        return await self.store.update(mutate)

    async def update(
        self,
        id: Any,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Update a record by primary key.

        Args:
            id: Primary key value
            data: Fields to change

        Returns:
            Updated record or None if not found
        """
        key = str(id)

        if not data or key not in self._records():
            return None

        def mutate(document: Dict[str, Any]) -> Optional[Dict[str, Any]]:
            record = document[self.collection].get(key)
            if record is None:
                return None
            record.update(data)
            return dict(record)

        return await self.store.update(mutate)

    async def upsert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert or replace a record.

        Args:
            data: Record data (must include the primary key)

        Returns:
            Stored record
        """
        key = data.get(self.primary_key)
        if key in (None, ""):
            raise ValueError(f"{self.collection} record requires '{self.primary_key}'")
        key = str(key)

        def mutate(document: Dict[str, Any]) -> Dict[str, Any]:
            document[self.collection][key] = dict(data)
            return dict(data)

        return await self.store.update(mutate)

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by primary key.

        Args:
            id: Primary key value

        Returns:
            True if deleted, False otherwise
        """
        key = str(id)
        if key not in self._records():
            return False

        def mutate(document: Dict[str, Any]) -> bool:
            return document[self.collection].pop(key, None) is not None

        return await self.store.update(mutate)

    async def delete_where(self, conditions: Dict[str, Any]) -> int:
        """
        Delete records by conditions.

        Args:
            conditions: Key-value conditions

        Returns:
            Number of deleted records
        """
        if not conditions:
            raise ValueError("Delete conditions cannot be empty")

        return await self.delete_matching(lambda record: self._matches(record, conditions))

    async def delete_matching(self, predicate) -> int:
        """
        Delete every record for which ``predicate(record)`` is true.

        Returns:
            Number of deleted records
        """
        if not any(predicate(record) for record in self._records().values()):
            return 0

        def mutate(document: Dict[str, Any]) -> int:
            records = document[self.collection]
            doomed = [key for key, record in records.items() if predicate(record)]
            for key in doomed:
                del records[key]
            return len(doomed)

        return await self.store.update(mutate)

    async def count(self, conditions: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records.

        Args:
            conditions: Optional filter conditions

        Returns:
            Record count
        """
        conditions = conditions or {}
        return sum(1 for record in self._records().values() if self._matches(record, conditions))

    async def exists(self, conditions: Dict[str, Any]) -> bool:
        """
        Check if record exists.

        Args:
            conditions: Filter conditions

        Returns:
            True if exists, False otherwise
        """
        return await self.count(conditions) > 0
