import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.errors import InternalFailureError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def db_transaction(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Commit everything done inside the block, or nothing.

    Store failures are rolled back and surfaced as InternalFailureError;
    any other exception (domain errors included) is rolled back and re-raised.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Database transaction failed")
        raise InternalFailureError("Database operation failed") from e
    except Exception:
        await db.rollback()
        raise
