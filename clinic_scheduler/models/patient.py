"""Patient model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer
from sqlalchemy.orm import relationship
from clinic_scheduler.database import Base
from clinic_scheduler.models.user import User


class Patient(Base):
    """Represents a patient profile attached to a user account."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    user = relationship(User, lazy="joined", innerjoin=True)
