"""
User model. Role is stored on the row and re-read on every request.
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Enum
from sqlalchemy.orm import relationship

from facility_booking.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    EMPLOYEE = "EMPLOYEE"
    FACILITY_MANAGER = "FACILITY_MANAGER"
    GROUP_DIRECTOR = "GROUP_DIRECTOR"
    ADMIN = "ADMIN"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    image = Column(String(1024), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, length=32),
        nullable=False,
        default=UserRole.EMPLOYEE,
    )
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=True, index=True)

    # Relationships
    group = relationship("Group", back_populates="members")
    bookings = relationship("Booking", back_populates="requested_by", foreign_keys="Booking.requested_by_id")

    def __repr__(self) -> str:
        return f"<User(employee_id={self.employee_id}, role={self.role})>"
