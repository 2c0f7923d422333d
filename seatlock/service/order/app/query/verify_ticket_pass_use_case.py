from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.config.di import Container
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.order.domain.value_object.ticket_pass import (
    InvalidTicketPassError,
    TicketPass,
    verify_ticket_pass,
)


class VerifyTicketPassUseCase:
    """Check the signature of a scanned gate pass; no store access"""

    def __init__(self, *, signing_secret: str) -> None:
        self.signing_secret = signing_secret

    @classmethod
    @inject
    def depends(
        cls,
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(signing_secret=config.TICKET_SIGNING_SECRET.get_secret_value())

    @Logger.io(truncate_content=True)
    async def execute(self, *, pass_text: str) -> TicketPass:
        try:
            ticket_pass = verify_ticket_pass(pass_text.strip(), secret=self.signing_secret)
        except InvalidTicketPassError as e:
            metrics.record_ticket_pass_check(result=e.reason)
            Logger.base.warning(f'🚷 [TICKET] Pass rejected: {e.reason}')
            raise

        metrics.record_ticket_pass_check(result='ok')
        return ticket_pass
