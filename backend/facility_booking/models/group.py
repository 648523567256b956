"""
Group of employees. Its Group Director is the member whose role is
GROUP_DIRECTOR; at most one member holds that role per group.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from facility_booking.db.base import Base, TimestampMixin


class Group(Base, TimestampMixin):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    members = relationship("User", back_populates="group")

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name})>"
