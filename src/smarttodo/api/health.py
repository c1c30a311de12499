"""Health check endpoint.

Learn: Liveness probe. Always 200 while the process is serving; the
database check is reported in the body, not in the status code.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo import __version__
from smarttodo.db.engine import get_db
from smarttodo.errors import envelope

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"error: {e}"

    return envelope("SmartTodo API is running", data=checks)
