"""
Sequence allocator for the human-facing ``seq`` numbers.

Highlights, press releases and subscribers are numbered 1, 2, 3, ... per
resource type. The number is handed out by the server when a record is
created and never changes afterwards.

How it works:
-------------
Each resource type owns one row in ``sequence_counters``. Allocation is a
single atomic statement:

    UPDATE sequence_counters SET value = value + 1
    WHERE resource = :resource
    RETURNING value

so two concurrent creations can never receive the same number. The row
is created lazily: the first allocation seeds it from the current
``max(seq)`` of the resource table, which makes the counter continue any
numbering that already exists. If two requests race to seed, the loser's
insert is ignored and it simply retries the increment.

The counter row stays locked until the surrounding transaction commits,
and a rolled-back creation rolls its number back with it.

Usage:
------
    allocator = SequenceAllocator(db)
    seq = await allocator.resolve("highlights", FormMode.CREATE)
    seq = await allocator.resolve("highlights", FormMode.EDIT, existing_seq=12)
    preview = await allocator.peek("highlights")
"""

import enum
from typing import Dict, Optional, Type

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkadmin.core.errors import UpstreamError, ValidationError
from parkadmin.core.logging import get_logger
from parkadmin.db.base import BaseModel
from parkadmin.models.content import Highlight, PressRelease, SequenceCounter, Subscriber

logger = get_logger(__name__)


class FormMode(str, enum.Enum):
    """Whether a form is creating a new record or editing an existing one."""

    CREATE = "create"
    EDIT = "edit"

    def __str__(self) -> str:
        return self.value


# Resource key -> model carrying a ``seq`` column
SEQUENCED_RESOURCES: Dict[str, Type[BaseModel]] = {
    "highlights": Highlight,
    "press_releases": PressRelease,
    "subscribers": Subscriber,
}


class SequenceAllocator:
    """Hands out ``seq`` values for one database session."""

    # One attempt for the common case, one more after seeding the counter.
    MAX_ATTEMPTS = 2

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(
        self,
        resource: str,
        mode: FormMode,
        existing_seq: Optional[int] = None,
    ) -> int:
        """
        Return the ``seq`` a record should carry.

        EDIT returns ``existing_seq`` untouched without touching the
        database. CREATE allocates a fresh number.

        Raises:
            ValidationError: EDIT without an existing seq, or unknown resource
            UpstreamError: the database failed
        """
        if FormMode(mode) is FormMode.EDIT:
            if existing_seq is None:
                raise ValidationError("Existing sequence number is required when editing")
            return existing_seq
        return await self.allocate(resource)

    async def allocate(self, resource: str) -> int:
        """Atomically reserve the next ``seq`` for ``resource``."""
        model = self._model_for(resource)

        try:
            for attempt in range(1, self.MAX_ATTEMPTS + 1):
                value = await self._increment(resource)
                if value is not None:
                    logger.debug("seq_allocated", resource=resource, seq=value)
                    return value
                if attempt < self.MAX_ATTEMPTS:
                    await self._seed(resource, model)
        except SQLAlchemyError as e:
            logger.error("seq_allocation_failed", resource=resource, error=str(e))
            raise UpstreamError("Could not allocate a sequence number") from e

        logger.error("seq_counter_missing", resource=resource)
        raise UpstreamError("Could not allocate a sequence number")

    async def peek(self, resource: str) -> int:
        """
        Preview the next ``seq`` without reserving it.

        Used to show the number on a blank create form. The value actually
        stored is decided by allocate() at submit time.
        """
        model = self._model_for(resource)

        try:
            result = await self.db.execute(
                select(SequenceCounter.value).where(SequenceCounter.resource == resource)
            )
            current = result.scalar_one_or_none()
            if current is None:
                current = await self._current_max(model)
        except SQLAlchemyError as e:
            logger.error("seq_peek_failed", resource=resource, error=str(e))
            raise UpstreamError("Could not read the current sequence number") from e

        return current + 1

    # ========================================
    # Internals
    # ========================================

    def _model_for(self, resource: str) -> Type[BaseModel]:
        try:
            return SEQUENCED_RESOURCES[resource]
        except KeyError:
            raise ValidationError(f"Unknown sequenced resource: {resource}") from None

    async def _increment(self, resource: str) -> Optional[int]:
        stmt = (
            update(SequenceCounter)
            .where(SequenceCounter.resource == resource)
            .values(value=SequenceCounter.value + 1)
            .returning(SequenceCounter.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _current_max(self, model: Type[BaseModel]) -> int:
        result = await self.db.execute(select(func.coalesce(func.max(model.seq), 0)))
        return int(result.scalar_one())

    async def _seed(self, resource: str, model: Type[BaseModel]) -> None:
        start = await self._current_max(model)
        values = {"resource": resource, "value": start}

        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(SequenceCounter).values(**values).on_conflict_do_nothing(
                index_elements=["resource"]
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(SequenceCounter).values(**values).on_conflict_do_nothing(
                index_elements=["resource"]
            )
        else:
            stmt = insert(SequenceCounter).values(**values)

        await self.db.execute(stmt)
        logger.info("seq_counter_seeded", resource=resource, start=start)
