from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from seatlock.platform.config.core_setting import settings
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.reservation.app.command.release_hold_use_case import ReleaseHoldUseCase
from seatlock.service.reservation.app.command.request_hold_use_case import RequestHoldUseCase
from seatlock.service.reservation.app.query.list_active_locks_use_case import (
    ListActiveLocksUseCase,
)
from seatlock.service.reservation.driving_adapter.http_controller.schema.seat_lock_schema import (
    ActiveLocksResponse,
    HoldRequest,
    HoldResponse,
    ReleaseHoldResponse,
    SeatKeySchema,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def list_active_locks(
    event_id: str = Query(default=settings.DEFAULT_EVENT_ID),
    use_case: ListActiveLocksUseCase = Depends(ListActiveLocksUseCase.depends),
) -> ActiveLocksResponse:
    locks = await use_case.execute(event_id=event_id)
    return ActiveLocksResponse(locks=[SeatKeySchema.from_key(key) for key in locks])


@router.post('/hold', status_code=status.HTTP_200_OK)
@Logger.io
async def request_hold(
    request: HoldRequest,
    use_case: RequestHoldUseCase = Depends(RequestHoldUseCase.depends),
) -> HoldResponse:
    event_id = request.event_id or settings.DEFAULT_EVENT_ID
    with tracer.start_as_current_span('controller.request_hold') as span:
        span.set_attribute('event_id', event_id)
        span.set_attribute('seat_count', len(request.seats))

        result = await use_case.execute(
            event_id=event_id,
            seats=[seat.to_key() for seat in request.seats],
            ttl_seconds=(
                request.ttl_sec
                if request.ttl_sec is not None
                else settings.DEFAULT_HOLD_TTL_SECONDS
            ),
            hold_id=request.hold_id,
        )

    return HoldResponse(
        hold_id=result.hold_id,
        seats=[SeatKeySchema.from_key(key) for key in result.seats],
        expires_at=result.expires_at_epoch,
    )


@router.delete('/hold/{hold_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def release_hold(
    hold_id: str,
    use_case: ReleaseHoldUseCase = Depends(ReleaseHoldUseCase.depends),
) -> ReleaseHoldResponse:
    released = await use_case.execute(hold_id=hold_id)
    return ReleaseHoldResponse(released=released)
