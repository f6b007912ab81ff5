"""Medical service model definitions."""

from sqlalchemy import Boolean, Column, Integer, Numeric, String
from clinic_scheduler.database import Base


class Service(Base):
    """Represents a bookable medical service, e.g. a consultation."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, default="")
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), default=0)
    is_active = Column(Boolean, default=True, nullable=False)
