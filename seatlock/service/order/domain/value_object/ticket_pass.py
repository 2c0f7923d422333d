"""
Ticket Pass - the signed payload printed as the gate QR code

Payload (JSON):
    {"v": 1, "typ": "seatlock_ticket", "orderId": ..., "orderRef": ..., "txId": ...,
     "seats": [[tableId, seatNo], ...], "iat": <epoch seconds>, "sig": ...}

sig = base64url(HMAC-SHA256(secret, "orderId|orderRef|txId|iat")) without padding.
Seats are not part of the signature; they are informational for the gate.
"""

import base64
import hashlib
import hmac
from typing import Any, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
import pydantic_core

from seatlock.platform.exception.exceptions import DomainError


PASS_VERSION = 1
PASS_TYPE = 'seatlock_ticket'


class InvalidTicketPassError(DomainError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f'Invalid ticket pass: {reason}')

    def to_response(self) -> dict[str, Any]:
        return {'ok': False, 'reason': self.reason, 'detail': self.message}


class TicketPass(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    v: Literal[1] = PASS_VERSION
    typ: Literal['seatlock_ticket'] = PASS_TYPE
    order_id: str = Field(alias='orderId')
    order_ref: str = Field(alias='orderRef')
    tx_id: str = Field(default='', alias='txId')
    seats: List[Tuple[str, int]] = []
    iat: int = 0
    sig: str = ''

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip('=')


def sign_fields(*, order_id: str, order_ref: str, tx_id: str, iat: int, secret: str) -> str:
    message = '|'.join([order_id, order_ref, tx_id or '', str(iat or 0)])
    return _b64url(hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest())


def build_ticket_pass(
    *,
    order_id: str,
    order_ref: str,
    tx_id: str,
    seats: List[Tuple[str, int]],
    iat: int,
    secret: str,
) -> TicketPass:
    tx_id = tx_id or ''
    sig = sign_fields(order_id=order_id, order_ref=order_ref, tx_id=tx_id, iat=iat, secret=secret)
    return TicketPass(
        order_id=order_id, order_ref=order_ref, tx_id=tx_id, seats=seats, iat=iat, sig=sig
    )


def verify_ticket_pass(text: str, *, secret: str) -> TicketPass:
    """Parse and check a scanned pass; raises InvalidTicketPassError(bad_json/bad_type/bad_sig)"""
    try:
        data = pydantic_core.from_json(text)
    except ValueError:
        raise InvalidTicketPassError('bad_json') from None

    if not isinstance(data, dict) or data.get('typ') != PASS_TYPE or data.get('v') != PASS_VERSION:
        raise InvalidTicketPassError('bad_type')
    try:
        ticket_pass = TicketPass.model_validate(data)
    except PydanticValidationError:
        raise InvalidTicketPassError('bad_type') from None

    expected = sign_fields(
        order_id=ticket_pass.order_id,
        order_ref=ticket_pass.order_ref,
        tx_id=ticket_pass.tx_id,
        iat=ticket_pass.iat,
        secret=secret,
    )
    if not hmac.compare_digest(expected, ticket_pass.sig):
        raise InvalidTicketPassError('bad_sig')
    return ticket_pass
