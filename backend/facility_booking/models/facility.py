"""
Bookable facility, owned by exactly one Facility Manager.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from facility_booking.db.base import Base, TimestampMixin


class Facility(Base, TimestampMixin):
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    icon = Column(String(1024), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    manager_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=True)

    manager = relationship("User", foreign_keys=[manager_id], lazy="joined")
    bookings = relationship("Booking", back_populates="facility")

    def __repr__(self) -> str:
        return f"<Facility(slug={self.slug}, active={self.is_active})>"
