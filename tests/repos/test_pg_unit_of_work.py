"""SqlUnitOfWork error translation, without a database.

A stand-in session lets the commit/rollback paths fail on demand.
"""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from coursetrack.repos.pg_course_catalog import PgCourseCatalog
from coursetrack.repos.pg_unit_of_work import SqlUnitOfWork, storage_errors
from coursetrack.services.errors import StorageUnavailableError


class _Session:
    def __init__(self, commit_error: Exception | None = None) -> None:
        self.commit_error = commit_error
        self.committed = False
        self.rolled_back = False
        self.closed = False

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def close(self) -> None:
        self.closed = True


def _pool_timeout() -> PoolTimeoutError:
    return PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached")


def test_storage_errors_translates_pool_timeout() -> None:
    async def scenario():
        async with storage_errors():
            raise _pool_timeout()

    with pytest.raises(StorageUnavailableError) as exc_info:
        asyncio.run(scenario())
    assert exc_info.value.retryable is True
    assert isinstance(exc_info.value.__cause__, PoolTimeoutError)


def test_storage_errors_leaves_other_errors_alone() -> None:
    async def scenario():
        async with storage_errors():
            raise IntegrityError("insert", {}, Exception("duplicate key"))

    with pytest.raises(IntegrityError):
        asyncio.run(scenario())


def test_pool_timeout_inside_block_rolls_back_and_is_unavailable() -> None:
    session = _Session()

    async def scenario():
        async with SqlUnitOfWork(lambda: session):
            raise _pool_timeout()

    with pytest.raises(StorageUnavailableError):
        asyncio.run(scenario())
    assert session.rolled_back
    assert session.closed
    assert not session.committed


def test_failed_commit_is_unavailable_and_closes_session() -> None:
    session = _Session(commit_error=OperationalError("commit", {}, Exception("gone")))

    async def scenario():
        async with SqlUnitOfWork(lambda: session):
            pass

    with pytest.raises(StorageUnavailableError):
        asyncio.run(scenario())
    assert session.closed


def test_clean_exit_commits_and_catalog_shares_the_session() -> None:
    session = _Session()

    async def scenario():
        async with SqlUnitOfWork(lambda: session) as uow:
            return uow

    uow = asyncio.run(scenario())
    assert session.committed
    assert session.closed
    assert not session.rolled_back
    assert isinstance(uow.courses, PgCourseCatalog)
    assert uow.courses._session is session
