"""Generic data-access client over named collections.

Stores know nothing about tenants; they execute exactly the filter or payload
they are given. Tenant scoping is layered on top by TenantScopedDataAccess.
Records cross this boundary as plain dicts.
"""

import copy
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import COLLECTIONS, Base
from backend.app.tenancy.errors import UnknownCollection

Record = dict[str, Any]
Where = Mapping[str, Any]


class DataStore(Protocol):
    """Underlying store interface consumed by the scoping layer."""

    async def find_many(
        self,
        collection: str,
        where: Where,
        *,
        order_by: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        """Return all records matching every field in where."""
        ...

    async def find_first(
        self, collection: str, where: Where, *, order_by: str | None = None
    ) -> Record | None:
        """Return the first matching record or None."""
        ...

    async def find_unique(self, collection: str, key: str) -> Record | None:
        """Return the record with this primary key or None."""
        ...

    async def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """Insert a record and return it as stored."""
        ...

    async def update(self, collection: str, where: Where, data: Mapping[str, Any]) -> Record | None:
        """Update the first matching record; None if nothing matched."""
        ...

    async def delete(self, collection: str, where: Where) -> Record | None:
        """Delete the first matching record; None if nothing matched."""
        ...

    async def count(self, collection: str, where: Where) -> int:
        """Count matching records."""
        ...


def _parse_order(order_by: str | None) -> tuple[str, bool]:
    """Split "-field" into ("field", descending)."""
    if not order_by:
        return "id", False
    if order_by.startswith("-"):
        return order_by[1:], True
    return order_by, False


class SqlStore:
    """SQLAlchemy async implementation of DataStore."""

    def __init__(self, session: AsyncSession, *, autocommit: bool = True) -> None:
        self._session = session
        self._autocommit = autocommit

    def _model(self, collection: str) -> type[Base]:
        model = COLLECTIONS.get(collection)
        if model is None:
            raise UnknownCollection(collection)
        return model

    @staticmethod
    def _column(model: type[Base], field: str) -> Any:
        if field not in model.__table__.columns:
            raise ValueError(f"{model.__tablename__} has no field {field!r}")
        return getattr(model, field)

    def _select(self, model: type[Base], where: Where) -> Any:
        stmt = select(model)
        for field, value in where.items():
            stmt = stmt.where(self._column(model, field) == value)
        return stmt

    @staticmethod
    def _to_record(instance: Base) -> Record:
        return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}

    async def _commit(self) -> None:
        try:
            if self._autocommit:
                await self._session.commit()
            else:
                await self._session.flush()
        except Exception:
            await self._session.rollback()
            raise

    async def _first_instance(self, collection: str, where: Where) -> Base | None:
        model = self._model(collection)
        stmt = self._select(model, where).order_by(self._column(model, "id")).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_many(
        self,
        collection: str,
        where: Where,
        *,
        order_by: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        """Return all records matching every field in where."""
        model = self._model(collection)
        field, descending = _parse_order(order_by)
        column = self._column(model, field)
        stmt = self._select(model, where).order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_record(row) for row in result.scalars().all()]

    async def find_first(
        self, collection: str, where: Where, *, order_by: str | None = None
    ) -> Record | None:
        """Return the first matching record or None."""
        records = await self.find_many(collection, where, order_by=order_by, limit=1)
        return records[0] if records else None

    async def find_unique(self, collection: str, key: str) -> Record | None:
        """Return the record with this primary key or None."""
        model = self._model(collection)
        instance = await self._session.get(model, key)
        return self._to_record(instance) if instance is not None else None

    async def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """Insert a record and return it as stored."""
        model = self._model(collection)
        for field in data:
            self._column(model, field)
        instance = model(**data)
        self._session.add(instance)
        await self._commit()
        await self._session.refresh(instance)
        return self._to_record(instance)

    async def update(self, collection: str, where: Where, data: Mapping[str, Any]) -> Record | None:
        """Update the first matching record; None if nothing matched."""
        instance = await self._first_instance(collection, where)
        if instance is None:
            return None

        model = type(instance)
        for field, value in data.items():
            self._column(model, field)
            setattr(instance, field, value)

        await self._commit()
        await self._session.refresh(instance)
        return self._to_record(instance)

    async def delete(self, collection: str, where: Where) -> Record | None:
        """Delete the first matching record; None if nothing matched."""
        instance = await self._first_instance(collection, where)
        if instance is None:
            return None

        record = self._to_record(instance)
        await self._session.delete(instance)
        await self._commit()
        return record

    async def count(self, collection: str, where: Where) -> int:
        """Count matching records."""
        model = self._model(collection)
        stmt = select(func.count()).select_from(self._select(model, where).subquery())
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class InMemoryStore:
    """In-memory implementation of DataStore."""

    def __init__(self, collections: set[str] | None = None) -> None:
        self._collections = collections or set(COLLECTIONS)
        self._rows: dict[str, dict[str, Record]] = {name: {} for name in self._collections}

    def _table(self, collection: str) -> dict[str, Record]:
        if collection not in self._collections:
            raise UnknownCollection(collection)
        return self._rows[collection]

    @staticmethod
    def _matches(record: Record, where: Where) -> bool:
        return all(record.get(field) == value for field, value in where.items())

    def _select(self, collection: str, where: Where, order_by: str | None = None) -> list[Record]:
        field, descending = _parse_order(order_by)
        rows = [row for row in self._table(collection).values() if self._matches(row, where)]
        # None sorts first, like NULLS FIRST on ascending order.
        rows.sort(key=lambda row: (row.get(field) is not None, row.get(field)), reverse=descending)
        return rows

    async def find_many(
        self,
        collection: str,
        where: Where,
        *,
        order_by: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        """Return all records matching every field in where."""
        rows = self._select(collection, where, order_by)[offset:]
        if limit is not None:
            rows = rows[:limit]
        return [copy.deepcopy(row) for row in rows]

    async def find_first(
        self, collection: str, where: Where, *, order_by: str | None = None
    ) -> Record | None:
        """Return the first matching record or None."""
        rows = self._select(collection, where, order_by)
        return copy.deepcopy(rows[0]) if rows else None

    async def find_unique(self, collection: str, key: str) -> Record | None:
        """Return the record with this primary key or None."""
        row = self._table(collection).get(key)
        return copy.deepcopy(row) if row is not None else None

    async def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """Insert a record and return it as stored."""
        table = self._table(collection)
        record = copy.deepcopy(dict(data))
        record.setdefault("id", str(uuid.uuid4()))
        record.setdefault("created_at", datetime.now(timezone.utc))
        if record["id"] in table:
            raise ValueError(f"Duplicate primary key {record['id']!r} in {collection}")
        table[record["id"]] = record
        return copy.deepcopy(record)

    async def update(self, collection: str, where: Where, data: Mapping[str, Any]) -> Record | None:
        """Update the first matching record; None if nothing matched."""
        rows = self._select(collection, where)
        if not rows:
            return None
        record = rows[0]
        if data.get("id", record["id"]) != record["id"]:
            raise ValueError(f"{collection} primary key cannot be updated")
        record.update(copy.deepcopy(dict(data)))
        return copy.deepcopy(record)

    async def delete(self, collection: str, where: Where) -> Record | None:
        """Delete the first matching record; None if nothing matched."""
        rows = self._select(collection, where)
        if not rows:
            return None
        return self._table(collection).pop(rows[0]["id"])

    async def count(self, collection: str, where: Where) -> int:
        """Count matching records."""
        return len(self._select(collection, where))
