"""
Record store base: hash-per-record storage, all-ids set and CRUD.

Each entity kind lives under ``{namespace}:{id}`` as a Redis hash, with
``{namespace}:ids`` enumerating every live identifier. Writes run as one
MULTI/EXEC batch with the record key WATCHed, so the snapshot used to
compute index deltas is the one the batch commits against.
"""

import uuid
from typing import Any, Generic, Iterable, Mapping, TypeVar

from loguru import logger
from redis.client import Pipeline

from barangay_registry.config import Config, get_config
from barangay_registry.models import Page, RegistryModel
from barangay_registry.models.common import utc_now
from barangay_registry.repositories import codec
from barangay_registry.repositories.database import RedisConnection
from barangay_registry.repositories.errors import (
    DuplicateKeyError,
    NotFoundError,
    RecordValidationError,
    store_operation,
)
from barangay_registry.repositories.index_manager import IndexManager

M = TypeVar("M", bound=RegistryModel)

IMMUTABLE_FIELDS = ("id", "createdAt")


class RecordRepository(Generic[M]):
    """Shared CRUD for one entity kind.

    Subclasses set ``kind``, ``namespace``, ``id_prefix`` and ``model`` and
    override the hooks below to add index keys, extra checks and extra
    writes.
    """

    kind: str
    namespace: str
    id_prefix: str
    model: type[M]

    def __init__(
        self,
        db: RedisConnection,
        indexes: IndexManager,
        config: Config | None = None,
    ) -> None:
        self.db = db
        self.indexes = indexes
        self.config = config or get_config()

    # =========================================================================
    # Keys
    # =========================================================================

    def key(self, record_id: str) -> str:
        return f"{self.namespace}:{record_id}"

    @property
    def ids_key(self) -> str:
        return f"{self.namespace}:ids"

    def new_id(self) -> str:
        return f"{self.id_prefix}:{uuid.uuid4()}"

    # =========================================================================
    # Hooks
    # =========================================================================

    def _build(self, payload: Mapping[str, Any]) -> M:
        """Validate a complete payload into a record."""
        return codec.validate(self.model, payload)

    def _encode(self, record: M) -> dict[str, str]:
        return codec.encode(record)

    def _index_keys(self, record: M, fields: Mapping[str, str]) -> set[str]:
        """Membership-index keys that should contain the record's id."""
        return set()

    def _watch_keys(self, record: M, existing: M | None) -> list[str]:
        """Additional keys the write depends on."""
        return []

    def _before_write(self, pipe: Pipeline, record: M, existing: M | None) -> None:
        """Checks run against the watched snapshot before MULTI."""

    def _queue_extra(self, pipe: Pipeline, record: M, existing: M | None) -> None:
        """Writes beyond the hash, all-ids set and membership indexes."""

    def _delete_watch_keys(self, record_id: str) -> list[str]:
        return []

    def _before_delete(self, pipe: Pipeline, existing: M) -> None:
        """Checks run against the watched snapshot before deletion."""

    def _queue_delete_extra(self, pipe: Pipeline, existing: M) -> None:
        pass

    def _present(self, record: M) -> Any:
        """What callers see for a stored record."""
        return record

    # =========================================================================
    # Reads
    # =========================================================================

    def _load(self, record_id: str) -> M | None:
        return codec.decode(self.model, self.db.client.hgetall(self.key(record_id)))

    @store_operation
    def get(self, record_id: str) -> Any:
        """Get a record by identifier.

        Returns:
            The decoded record, or None if absent.
        """
        record = self._load(record_id)
        return self._present(record) if record is not None else None

    @store_operation
    def exists(self, record_id: str) -> bool:
        return bool(self.db.client.exists(self.key(record_id)))

    def resolve_many(self, record_ids: Iterable[str]) -> list[Any]:
        """Fetch several records in one round trip.

        Identifiers that no longer resolve, or whose stored fields no longer
        validate, are skipped.
        """
        ids = list(record_ids)
        if not ids:
            return []

        pipe = self.db.client.pipeline(transaction=False)
        for record_id in ids:
            pipe.hgetall(self.key(record_id))
        results = pipe.execute()

        records = []
        for record_id, fields in zip(ids, results):
            try:
                record = codec.decode(self.model, fields)
            except RecordValidationError as e:
                logger.warning(f"Skipping unreadable {self.kind} {record_id}: {e}")
                continue
            if record is None:
                logger.debug(f"Dangling {self.kind} id {record_id} skipped")
                continue
            records.append(self._present(record))
        return records

    @store_operation
    def all_ids(self) -> list[str]:
        """Every live identifier, sorted."""
        return sorted(self.db.client.smembers(self.ids_key))

    @store_operation
    def all(self) -> list[Any]:
        """Every record of this kind, skipping unresolved ids."""
        return self.resolve_many(self.all_ids())

    @store_operation
    def list(self, page: int = 1, limit: int | None = None) -> Page:
        """Page through records.

        Args:
            page: 1-based page number.
            limit: Page size. Defaults to the configured page size.

        Returns:
            Page with items, total, page, limit and total_pages. Items whose
            ids no longer resolve are dropped, so a page may hold fewer than
            ``limit`` items.
        """
        if limit is None:
            limit = self.config.default_page_size
        if page < 1 or limit < 1:
            raise RecordValidationError("page and limit must be positive", ["page", "limit"])

        ids = self.all_ids()
        start = (page - 1) * limit
        items = self.resolve_many(ids[start:start + limit])
        return Page.build(items=items, total=len(ids), page=page, limit=limit)

    # =========================================================================
    # Writes
    # =========================================================================

    @store_operation
    def create(self, data: Mapping[str, Any]) -> str:
        """Create a record.

        Args:
            data: Field values by attribute name or stored alias. An ``id``
                may be supplied; otherwise one is generated.

        Returns:
            The record identifier.
        """
        payload = codec.normalize_keys(self.model, data)
        record_id = payload.get("id") or self.new_id()
        now = utc_now()
        payload.update(id=record_id, createdAt=now, updatedAt=now)
        record = self._build(payload)

        key = self.key(record_id)
        watch = [key, *self._watch_keys(record, None)]
        with self.db.transaction(*watch, description=f"create {self.kind} {record_id}") as pipe:
            if pipe.exists(key):
                logger.warning(f"Refusing to create {self.kind}: id {record_id} exists")
                raise DuplicateKeyError("id", record_id)
            self._before_write(pipe, record, None)

            fields = self._encode(record)
            pipe.multi()
            pipe.hset(key, mapping=fields)
            pipe.sadd(self.ids_key, record_id)
            self.indexes.apply(pipe, record_id, set(), self._index_keys(record, fields))
            self._queue_extra(pipe, record, None)

        logger.info(f"Created {self.kind} {record_id}")
        return record_id

    @store_operation
    def update(self, record_id: str, data: Mapping[str, Any]) -> Any:
        """Merge ``data`` over an existing record.

        Raises:
            NotFoundError: No record with this identifier.

        Returns:
            The merged record.
        """
        key = self.key(record_id)
        with self.db.transaction(key, description=f"update {self.kind} {record_id}") as pipe:
            old_fields = pipe.hgetall(key)
            existing = codec.decode(self.model, old_fields)
            if existing is None:
                raise NotFoundError(self.kind, record_id)

            changes = codec.normalize_keys(self.model, data)
            for name in IMMUTABLE_FIELDS:
                changes.pop(name, None)
            payload = {**existing.model_dump(by_alias=True), **changes, "updatedAt": utc_now()}
            record = self._build(payload)

            extra = self._watch_keys(record, existing)
            if extra:
                pipe.watch(*extra)
            self._before_write(pipe, record, existing)

            fields = self._encode(record)
            pipe.multi()
            pipe.hset(key, mapping=fields)
            self.indexes.apply(
                pipe,
                record_id,
                self._index_keys(existing, old_fields),
                self._index_keys(record, fields),
            )
            self._queue_extra(pipe, record, existing)

        logger.info(f"Updated {self.kind} {record_id}")
        return self._present(record)

    @store_operation
    def delete(self, record_id: str) -> bool:
        """Delete a record and every index entry referencing it.

        Raises:
            NotFoundError: No record with this identifier.
        """
        key = self.key(record_id)
        watch = [key, *self._delete_watch_keys(record_id)]
        with self.db.transaction(*watch, description=f"delete {self.kind} {record_id}") as pipe:
            fields = pipe.hgetall(key)
            existing = codec.decode(self.model, fields)
            if existing is None:
                raise NotFoundError(self.kind, record_id)
            self._before_delete(pipe, existing)

            pipe.multi()
            self.indexes.apply(pipe, record_id, self._index_keys(existing, fields), set())
            self._queue_delete_extra(pipe, existing)
            pipe.srem(self.ids_key, record_id)
            pipe.delete(key)

        logger.info(f"Deleted {self.kind} {record_id}")
        return True
