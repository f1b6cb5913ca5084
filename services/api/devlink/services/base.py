"""
Load-mutate-save helper shared by the aggregate services.

A mutation is a coroutine that loads an aggregate, changes it in the
session and returns the value to hand back to the caller. It is committed
under SQLAlchemy's version check; when another writer got there first the
session is rolled back and the mutation runs again on a fresh copy.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from devlink.errors import Conflict, InternalError
from devlink.telemetry import WRITE_RETRIES_TOTAL

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Called with refresh=True on retries so the aggregate is re-read from storage
Mutation = Callable[[bool], Awaitable[T]]


async def commit_with_retry(
    session: AsyncSession,
    mutation: Mutation,
    *,
    aggregate: str,
    max_attempts: int,
) -> T:
    for attempt in range(max(1, max_attempts)):
        result = await mutation(attempt > 0)
        try:
            await session.commit()
            return result
        except StaleDataError:
            await session.rollback()
            WRITE_RETRIES_TOTAL.labels(aggregate=aggregate).inc()
            logger.warning(
                "Concurrent update on %s (attempt %d/%d), retrying",
                aggregate, attempt + 1, max_attempts,
            )
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Failed to persist %s", aggregate)
            raise InternalError() from exc

    raise Conflict(f"Too many concurrent updates to this {aggregate}, please retry")


async def commit(session: AsyncSession, what: str) -> None:
    """Commit without retry, surfacing storage failures as InternalError."""
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to persist %s", what)
        raise InternalError() from exc
