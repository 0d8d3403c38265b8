"""
Database Dependencies for FastAPI Routes

Routes declare what they need and FastAPI provides it:

    @router.get("/highlights/{highlight_id}")
    async def get_highlight(highlight_id: str, db: DBSession):
        ...

Benefits:
---------
1. Less boilerplate: no manual session management in every route
2. Automatic cleanup: sessions always closed, even on errors
3. Easy testing: ``app.dependency_overrides[get_db]`` swaps in a test session
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from parkadmin.db.session import get_session


# ================================
# Database Session Dependency
# ================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    Each request gets its own session. Routes commit explicitly; on error the
    session is rolled back by get_session().

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in get_session():
        yield session


# Reusable annotation: ``db: DBSession`` instead of ``db: AsyncSession = Depends(get_db)``
DBSession = Annotated[AsyncSession, Depends(get_db)]


__all__ = [
    "get_db",
    "DBSession",
]
