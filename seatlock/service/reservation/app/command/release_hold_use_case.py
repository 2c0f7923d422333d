from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from seatlock.platform.exception.exceptions import ValidationError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics


class ReleaseHoldUseCase:
    """Drop every hold row of a hold id, on any table or seat"""

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, hold_id: str) -> int:
        with self.tracer.start_as_current_span(
            'use_case.release_hold', attributes={'hold.id': hold_id or ''}
        ):
            async with self.uow_factory() as uow:
                released = await self.release_within(uow, hold_id=hold_id)
                await uow.commit()
            return released

    async def release_within(self, uow: AbstractUnitOfWork, *, hold_id: str) -> int:
        """Release inside the caller's unit of work; the caller commits"""
        if not hold_id or not hold_id.strip():
            raise ValidationError('holdId required')

        released = await uow.seat_lock_repo.delete_holds_by_hold_id(hold_id=hold_id.strip())
        metrics.record_release(released=released)
        Logger.base.info(f'🔓 [RELEASE] {hold_id} released {released} hold rows')
        return released
