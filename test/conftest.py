"""
Test Configuration and Fixtures

This module provides:
- Early environment setup (test log directory) before application imports
- In-memory store fixtures backing the unit of work for unit tests
- Use case factories bound to the in-memory store
- A FastAPI TestClient whose use case dependencies resolve to the in-memory store

Architecture:
- Unit tests (test/**/unit/): run entirely against fake_store.InMemoryStore
- Integration tests (test/**/integration/): need SEATLOCK_INTEGRATION=1 and a PostgreSQL
"""

# =============================================================================
# Environment setup MUST happen before any application import
# loguru_io_config reads TEST_LOG_DIR at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['SEATS_PER_TABLE'] = '10'
    os.environ['DEFAULT_HOLD_TTL_SECONDS'] = '600'
    os.environ['DEFAULT_EVENT_ID'] = 'default'
    os.environ.setdefault('DB_POOL_SIZE', '2')
    os.environ.setdefault('DB_POOL_MAX_OVERFLOW', '2')
    os.environ.setdefault('POSTGRES_DB', 'seatlock_test_db')


_early_setup_test_environment()

from collections.abc import Callable, Generator  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from fake_store import InMemoryStore, InMemoryUnitOfWork  # noqa: E402
from seatlock.platform.app_factory import create_app  # noqa: E402
from seatlock.service.order.app.command.cancel_order_use_case import (  # noqa: E402
    CancelOrderUseCase,
)
from seatlock.service.order.app.command.check_in_order_use_case import (  # noqa: E402
    CheckInOrderUseCase,
)
from seatlock.service.order.app.command.create_order_use_case import (  # noqa: E402
    CreateOrderUseCase,
)
from seatlock.service.order.app.command.settle_payment_use_case import (  # noqa: E402
    SettlePaymentUseCase,
)
from seatlock.service.order.app.query.get_order_use_case import GetOrderUseCase  # noqa: E402
from seatlock.service.order.app.query.get_ticket_pass_use_case import (  # noqa: E402
    GetTicketPassUseCase,
)
from seatlock.service.order.app.query.verify_ticket_pass_use_case import (  # noqa: E402
    VerifyTicketPassUseCase,
)
from seatlock.service.reservation.app.command.promote_hold_use_case import (  # noqa: E402
    PromoteHoldUseCase,
)
from seatlock.service.reservation.app.command.release_hold_use_case import (  # noqa: E402
    ReleaseHoldUseCase,
)
from seatlock.service.reservation.app.command.request_hold_use_case import (  # noqa: E402
    RequestHoldUseCase,
)
from seatlock.service.reservation.app.query.list_active_locks_use_case import (  # noqa: E402
    ListActiveLocksUseCase,
)


SEATS_PER_TABLE = 10
TICKET_SIGNING_SECRET = 'test-ticket-signing-secret'


# =============================================================================
# Store / Unit of Work
# =============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> Callable[[], InMemoryUnitOfWork]:
    def _factory() -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(store=store)

    return _factory


# =============================================================================
# Use Cases
# =============================================================================


@pytest.fixture
def request_hold(uow_factory: Callable[[], InMemoryUnitOfWork]) -> RequestHoldUseCase:
    return RequestHoldUseCase(uow_factory=uow_factory, seats_per_table=SEATS_PER_TABLE)


@pytest.fixture
def release_hold(uow_factory: Callable[[], InMemoryUnitOfWork]) -> ReleaseHoldUseCase:
    return ReleaseHoldUseCase(uow_factory=uow_factory)


@pytest.fixture
def promote_hold(uow_factory: Callable[[], InMemoryUnitOfWork]) -> PromoteHoldUseCase:
    return PromoteHoldUseCase(uow_factory=uow_factory)


@pytest.fixture
def list_active_locks(uow_factory: Callable[[], InMemoryUnitOfWork]) -> ListActiveLocksUseCase:
    return ListActiveLocksUseCase(uow_factory=uow_factory, seats_per_table=SEATS_PER_TABLE)


@pytest.fixture
def create_order(uow_factory: Callable[[], InMemoryUnitOfWork]) -> CreateOrderUseCase:
    return CreateOrderUseCase(uow_factory=uow_factory, fee_rate=0.01, default_currency='EUR')


@pytest.fixture
def settle_payment(
    uow_factory: Callable[[], InMemoryUnitOfWork],
    promote_hold: PromoteHoldUseCase,
    release_hold: ReleaseHoldUseCase,
) -> SettlePaymentUseCase:
    return SettlePaymentUseCase(
        uow_factory=uow_factory, promote_hold=promote_hold, release_hold=release_hold
    )


@pytest.fixture
def cancel_order(
    uow_factory: Callable[[], InMemoryUnitOfWork], release_hold: ReleaseHoldUseCase
) -> CancelOrderUseCase:
    return CancelOrderUseCase(uow_factory=uow_factory, release_hold=release_hold)


@pytest.fixture
def get_order(uow_factory: Callable[[], InMemoryUnitOfWork]) -> GetOrderUseCase:
    return GetOrderUseCase(uow_factory=uow_factory)


@pytest.fixture
def get_ticket_pass(uow_factory: Callable[[], InMemoryUnitOfWork]) -> GetTicketPassUseCase:
    return GetTicketPassUseCase(uow_factory=uow_factory, signing_secret=TICKET_SIGNING_SECRET)


@pytest.fixture
def verify_ticket_pass() -> VerifyTicketPassUseCase:
    return VerifyTicketPassUseCase(signing_secret=TICKET_SIGNING_SECRET)


@pytest.fixture
def check_in_order(uow_factory: Callable[[], InMemoryUnitOfWork]) -> CheckInOrderUseCase:
    return CheckInOrderUseCase(uow_factory=uow_factory)


# =============================================================================
# HTTP client
# =============================================================================


@pytest.fixture
def client(
    request_hold: RequestHoldUseCase,
    release_hold: ReleaseHoldUseCase,
    list_active_locks: ListActiveLocksUseCase,
    create_order: CreateOrderUseCase,
    settle_payment: SettlePaymentUseCase,
    cancel_order: CancelOrderUseCase,
    get_order: GetOrderUseCase,
    get_ticket_pass: GetTicketPassUseCase,
    verify_ticket_pass: VerifyTicketPassUseCase,
    check_in_order: CheckInOrderUseCase,
) -> Generator[TestClient, None, None]:
    app = create_app()
    app.dependency_overrides[RequestHoldUseCase.depends] = lambda: request_hold
    app.dependency_overrides[ReleaseHoldUseCase.depends] = lambda: release_hold
    app.dependency_overrides[ListActiveLocksUseCase.depends] = lambda: list_active_locks
    app.dependency_overrides[CreateOrderUseCase.depends] = lambda: create_order
    app.dependency_overrides[SettlePaymentUseCase.depends] = lambda: settle_payment
    app.dependency_overrides[CancelOrderUseCase.depends] = lambda: cancel_order
    app.dependency_overrides[GetOrderUseCase.depends] = lambda: get_order
    app.dependency_overrides[GetTicketPassUseCase.depends] = lambda: get_ticket_pass
    app.dependency_overrides[VerifyTicketPassUseCase.depends] = lambda: verify_ticket_pass
    app.dependency_overrides[CheckInOrderUseCase.depends] = lambda: check_in_order

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
