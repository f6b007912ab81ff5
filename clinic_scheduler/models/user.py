"""User model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from clinic_scheduler.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, default="")
    last_name = Column(String, default="")
    role = Column(String, nullable=False)  # patient/doctor/admin
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or self.email
