"""
Booking model: one requester, one facility, one time range.

Key design decisions:
- `status` (approval chain) and `cancellation_status` (cancellation chain)
  are independent columns; an approved booking can be under cancellation review
- Partial unique index on (facility_id, start_time) over active rows backs
  the overlap check done in the booking service
- Composite indexes cover the dashboard count queries
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, ForeignKey, Enum, Index, CheckConstraint, text,
)
from sqlalchemy.orm import relationship

from facility_booking.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED_BY_GD = "APPROVED_BY_GD"
    APPROVED_BY_FM = "APPROVED_BY_FM"
    APPROVED_BY_ADMIN = "APPROVED_BY_ADMIN"
    REJECTED = "REJECTED"


class CancellationStatus(str, enum.Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    APPROVED_BY_GD = "APPROVED_BY_GD"
    APPROVED_BY_FM = "APPROVED_BY_FM"
    REJECTED = "REJECTED"


ACTIVE_BOOKING_CLAUSE = "status != 'REJECTED' AND cancellation_status != 'APPROVED_BY_FM'"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    purpose = Column(String(1000), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    color = Column(String(32), nullable=True)
    status = Column(
        Enum(BookingStatus, name="booking_status", native_enum=False, length=32),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    cancellation_status = Column(
        Enum(CancellationStatus, name="cancellation_status", native_enum=False, length=32),
        nullable=False,
        default=CancellationStatus.NONE,
    )
    requested_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id"), nullable=False, index=True)

    # Relationships
    requested_by = relationship("User", back_populates="bookings", lazy="joined")
    facility = relationship("Facility", back_populates="bookings", lazy="joined")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_booking_time_range"),
        Index(
            "uq_bookings_facility_start_active",
            "facility_id",
            "start_time",
            unique=True,
            postgresql_where=text(ACTIVE_BOOKING_CLAUSE),
            sqlite_where=text(ACTIVE_BOOKING_CLAUSE),
        ),
        Index("ix_bookings_facility_status", "facility_id", "status"),
        Index("ix_bookings_facility_cancellation", "facility_id", "cancellation_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, facility={self.facility_id}, "
            f"status={self.status}, cancellation={self.cancellation_status})>"
        )
