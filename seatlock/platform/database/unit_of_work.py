"""
Unit of Work Pattern - owns the database session and repositories of one transaction

Architecture:
- UoW owns the session lifecycle and commit/rollback
- Repositories share the UoW session and never commit on their own
- Use cases coordinate repositories through the UoW
- Driver errors raised inside the block surface as StoreError after rollback
"""

from __future__ import annotations

import abc
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any, Callable, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from seatlock.platform.exception.exceptions import StoreError
from seatlock.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from seatlock.platform.database.orm_db_setting import Database
    from seatlock.service.order.app.interface.i_order_repo import IOrderRepo
    from seatlock.service.order.app.interface.i_ticket_repo import ITicketRepo
    from seatlock.service.reservation.app.interface.i_order_line_item_reader import (
        IOrderLineItemReader,
    )
    from seatlock.service.reservation.app.interface.i_seat_lock_repo import ISeatLockRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work

    Usage:
        async with uow:
            await uow.seat_lock_repo.upsert_holds(...)
            await uow.commit()

    Leaving the block without commit rolls everything back.
    """

    seat_lock_repo: ISeatLockRepo
    order_repo: IOrderRepo
    ticket_repo: ITicketRepo
    order_line_item_reader: IOrderLineItemReader

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    One instance per use-case call; the DI container hands use cases a factory.
    """

    def __init__(self, *, database: Database) -> None:
        self._database = database
        self._exit_stack: Optional[AsyncExitStack] = None
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from seatlock.service.order.driven_adapter.repo.order_repo_impl import OrderRepoImpl
        from seatlock.service.order.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl
        from seatlock.service.reservation.driven_adapter.repo.seat_lock_repo_impl import (
            SeatLockRepoImpl,
        )

        self._exit_stack = AsyncExitStack()
        self.session = await self._exit_stack.enter_async_context(self._database.session())

        # Repositories share the session
        self.seat_lock_repo = SeatLockRepoImpl(session=self.session)
        self.order_repo = OrderRepoImpl(session=self.session)
        self.ticket_repo = TicketRepoImpl(session=self.session)
        self.order_line_item_reader = self.order_repo

        await super().__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            if self._exit_stack is not None:
                await self._exit_stack.aclose()
                self._exit_stack = None

        if isinstance(exc, DBAPIError):
            Logger.base.error(f'💥 [DB] Transaction rolled back: {type(exc.orig).__name__}')
            raise StoreError('Store transaction failed, please retry') from exc

    async def _commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
