"""
Unit tests for SqlAlchemyUnitOfWork

The session is an AsyncMock; these tests pin commit/rollback behaviour and
the translation of driver errors into StoreError.
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import DBAPIError

from seatlock.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from seatlock.platform.exception.exceptions import StoreError, ValidationError


class StubDatabase:
    def __init__(self) -> None:
        self.session_mock = AsyncMock()
        self.closed = False

    @asynccontextmanager
    async def session(self):
        try:
            yield self.session_mock
        finally:
            self.closed = True


def driver_error() -> DBAPIError:
    return DBAPIError('INSERT INTO seat_locks ...', {}, Exception('deadlock detected'))


@pytest.mark.unit
class TestSqlAlchemyUnitOfWork:
    @pytest.mark.asyncio
    async def test_commit_then_close(self) -> None:
        database = StubDatabase()

        async with SqlAlchemyUnitOfWork(database=database) as uow:
            await uow.commit()

        database.session_mock.commit.assert_awaited_once()
        assert database.closed

    @pytest.mark.asyncio
    async def test_repositories_share_the_session(self) -> None:
        database = StubDatabase()

        async with SqlAlchemyUnitOfWork(database=database) as uow:
            assert uow.seat_lock_repo.session is database.session_mock
            assert uow.order_repo.session is database.session_mock
            assert uow.order_line_item_reader is uow.order_repo

    @pytest.mark.asyncio
    async def test_leaving_without_commit_rolls_back(self) -> None:
        database = StubDatabase()

        async with SqlAlchemyUnitOfWork(database=database):
            pass

        database.session_mock.commit.assert_not_awaited()
        database.session_mock.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_store_error(self) -> None:
        database = StubDatabase()

        with pytest.raises(StoreError) as exc_info:
            async with SqlAlchemyUnitOfWork(database=database):
                raise driver_error()

        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, DBAPIError)
        database.session_mock.rollback.assert_awaited()
        assert database.closed

    @pytest.mark.asyncio
    async def test_failed_commit_becomes_store_error(self) -> None:
        database = StubDatabase()
        database.session_mock.commit.side_effect = driver_error()

        with pytest.raises(StoreError):
            async with SqlAlchemyUnitOfWork(database=database) as uow:
                await uow.commit()

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self) -> None:
        database = StubDatabase()

        with pytest.raises(ValidationError):
            async with SqlAlchemyUnitOfWork(database=database):
                raise ValidationError('seats[] required')

        database.session_mock.rollback.assert_awaited()
