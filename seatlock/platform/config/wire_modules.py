"""
Wire Modules Configuration

Modules whose `depends` classmethods resolve Provide[Container.xxx] markers.
Shared between the service app and the integration test app.
"""

from types import ModuleType

from seatlock.service.order.app.command import (
    cancel_order_use_case,
    check_in_order_use_case,
    create_order_use_case,
    settle_payment_use_case,
)
from seatlock.service.order.app.query import (
    get_order_use_case,
    get_ticket_pass_use_case,
    verify_ticket_pass_use_case,
)
from seatlock.service.reservation.app.command import (
    promote_hold_use_case,
    release_hold_use_case,
    request_hold_use_case,
)
from seatlock.service.reservation.app.query import list_active_locks_use_case


WIRE_MODULES: list[ModuleType] = [
    request_hold_use_case,
    release_hold_use_case,
    promote_hold_use_case,
    list_active_locks_use_case,
    create_order_use_case,
    settle_payment_use_case,
    cancel_order_use_case,
    get_order_use_case,
    get_ticket_pass_use_case,
    verify_ticket_pass_use_case,
    check_in_order_use_case,
]
