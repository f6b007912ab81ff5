from dataclasses import dataclass

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.notifications.port import AppointmentNotice


@dataclass(frozen=True)
class Recipients:
    patient: str | None
    doctor: str | None


def build_notice(uow, appointment: Appointment, **extra) -> tuple[AppointmentNotice, Recipients]:
    """Collect names and addresses for an appointment notice.

    Must run inside the unit of work that loaded ``appointment``.
    """
    patient = uow.patients.find_by_id(appointment.patient_id)
    doctor = uow.doctors.find_by_id(appointment.doctor_id)
    service = uow.services.find_by_id(appointment.service_id)

    patient_user = patient.user if patient else None
    doctor_user = doctor.user if doctor else None

    notice = AppointmentNotice(
        appointment_id=appointment.id,
        patient_name=patient_user.full_name if patient_user else '',
        doctor_name=doctor_user.full_name if doctor_user else '',
        service_name=service.name if service else '',
        date=appointment.scheduled_at.strftime('%Y-%m-%d'),
        time=appointment.scheduled_at.strftime('%H:%M'),
        **extra,
    )
    recipients = Recipients(
        patient=patient_user.email if patient_user else None,
        doctor=doctor_user.email if doctor_user else None,
    )
    return notice, recipients
