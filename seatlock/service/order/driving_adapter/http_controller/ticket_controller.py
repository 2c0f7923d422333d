from fastapi import APIRouter, Depends, Request, status
from opentelemetry import trace

from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.app.command.check_in_order_use_case import CheckInOrderUseCase
from seatlock.service.order.app.query.verify_ticket_pass_use_case import VerifyTicketPassUseCase
from seatlock.service.order.driving_adapter.http_controller.schema.order_schema import (
    CheckInRequest,
    CheckInResponse,
    TicketPassCheckResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/qr/verify', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def verify_ticket_pass(
    request: Request,
    use_case: VerifyTicketPassUseCase = Depends(VerifyTicketPassUseCase.depends),
) -> TicketPassCheckResponse:
    """Body is the raw pass text as scanned from the QR code, any content type"""
    pass_text = (await request.body()).decode('utf-8', errors='replace')
    ticket_pass = await use_case.execute(pass_text=pass_text)
    return TicketPassCheckResponse(data=ticket_pass.model_dump(by_alias=True))


@router.post('/admin/check-in', status_code=status.HTTP_200_OK)
@Logger.io
async def check_in_order(
    request: CheckInRequest,
    use_case: CheckInOrderUseCase = Depends(CheckInOrderUseCase.depends),
) -> CheckInResponse:
    with tracer.start_as_current_span('controller.check_in_order') as span:
        span.set_attribute('order_ref', request.order_ref)

        order = await use_case.execute(order_ref=request.order_ref)
    return CheckInResponse(order_ref=order.order_ref, checked_in_at=order.checked_in_at)
