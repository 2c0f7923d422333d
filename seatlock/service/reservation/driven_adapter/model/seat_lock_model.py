from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from seatlock.platform.database.orm_db_setting import Base


class SeatLockModel(Base):
    """Temporary hold; one row per (event, table, seat), seat_no 0 = whole table"""

    __tablename__ = 'seat_locks'

    event_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    table_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seat_no: Mapped[int] = mapped_column(Integer, primary_key=True)
    hold_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index('ix_seat_locks_expires_at', 'expires_at'),)


class DoneSeatLockModel(Base):
    """Permanent allocation written on payment success; first writer wins"""

    __tablename__ = 'done_seatlocks'

    event_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    table_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seat_no: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
