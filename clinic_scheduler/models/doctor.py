"""Doctor and doctor-service assignment model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from clinic_scheduler.database import Base
from clinic_scheduler.models.user import User


class Doctor(Base):
    """Represents a doctor profile attached to a user account."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    specialty = Column(String, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    user = relationship(User, lazy="joined", innerjoin=True)


class DoctorService(Base):
    """Links a doctor to a service they offer."""
    __tablename__ = "doctor_services"
    __table_args__ = (UniqueConstraint("doctor_id", "service_id", name="uq_doctor_service"),)

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
