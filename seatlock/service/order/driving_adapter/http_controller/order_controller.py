from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from seatlock.platform.config.core_setting import settings
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.app.command.cancel_order_use_case import CancelOrderUseCase
from seatlock.service.order.app.command.create_order_use_case import CreateOrderUseCase
from seatlock.service.order.app.command.settle_payment_use_case import SettlePaymentUseCase
from seatlock.service.order.app.query.get_order_use_case import GetOrderUseCase
from seatlock.service.order.app.query.get_ticket_pass_use_case import GetTicketPassUseCase
from seatlock.service.order.driving_adapter.http_controller.schema.order_schema import (
    OrderCreateRequest,
    OrderResponse,
    SettlementRequest,
    SettlementResponse,
    TicketPassResponse,
    TicketResponse,
)
from seatlock.service.reservation.driving_adapter.http_controller.schema.seat_lock_schema import (
    SeatKeySchema,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: OrderCreateRequest,
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> OrderResponse:
    with tracer.start_as_current_span('controller.create_order') as span:
        span.set_attribute('order_ref', request.order_reference)

        order = await use_case.execute(
            order_ref=request.order_reference,
            event_id=request.event_id or settings.DEFAULT_EVENT_ID,
            hold_id=request.hold_id,
            customer=request.customer.to_entity(),
            items=[item.to_entity() for item in request.items],
            currency=request.currency,
        )
    return OrderResponse.from_entity(order)


@router.get('/{order_ref}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_order(
    order_ref: str,
    use_case: GetOrderUseCase = Depends(GetOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_ref=order_ref)
    return OrderResponse.from_entity(order)


@router.post('/{order_ref}/settlement', status_code=status.HTTP_200_OK)
@Logger.io
async def settle_payment(
    order_ref: str,
    request: SettlementRequest,
    use_case: SettlePaymentUseCase = Depends(SettlePaymentUseCase.depends),
) -> SettlementResponse:
    with tracer.start_as_current_span('controller.settle_payment') as span:
        span.set_attribute('order_ref', order_ref)
        span.set_attribute('succeeded', request.succeeded)

        result = await use_case.execute(
            order_ref=order_ref, succeeded=request.succeeded, tx_id=request.transaction_id
        )

    allocated = result.promotion.allocated if result.promotion else []
    return SettlementResponse(
        applied=result.applied,
        order=OrderResponse.from_entity(result.order),
        allocated=[SeatKeySchema.from_key(key) for key in allocated],
        released=result.released,
        tickets=[TicketResponse.from_entity(ticket) for ticket in result.tickets],
    )


@router.patch('/{order_ref}', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_order(
    order_ref: str,
    use_case: CancelOrderUseCase = Depends(CancelOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_ref=order_ref)
    return OrderResponse.from_entity(order)


@router.get('/{order_ref}/ticket-pass', status_code=status.HTTP_200_OK)
@Logger.io
async def get_ticket_pass(
    order_ref: str,
    use_case: GetTicketPassUseCase = Depends(GetTicketPassUseCase.depends),
) -> TicketPassResponse:
    result = await use_case.execute(order_ref=order_ref)
    return TicketPassResponse(
        order_reference=result.order.order_ref,
        tickets=[TicketResponse.from_entity(ticket) for ticket in result.tickets],
        ticket_pass=result.ticket_pass.to_json(),
    )
