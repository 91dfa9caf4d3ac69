import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from eventpages.config.database import async_session_manager
from eventpages.config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()

DatabaseCheck = Callable[[], Awaitable[bool]]


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    environment: str
    version: str


async def ping_database() -> bool:
    try:
        async with async_session_manager(auto_commit=False) as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False
    return True


def get_database_check() -> DatabaseCheck:
    """Dependency to get the database check."""
    return ping_database


@router.get("/", response_model=HealthCheckResponse)
async def health_check(check_database: DatabaseCheck = Depends(get_database_check)) -> HealthCheckResponse:
    """
    Health check endpoint. The API answers even when the database does not,
    reporting itself as degraded.
    """
    database_up = await check_database()
    return HealthCheckResponse(
        status="healthy" if database_up else "degraded",
        database="up" if database_up else "down",
        environment=settings.ENVIRONMENT,
        version=settings.app_version,
    )
