from dataclasses import dataclass

ROLE_ADMIN = 'admin'
ROLE_DOCTOR = 'doctor'
ROLE_PATIENT = 'patient'
ROLES = {ROLE_ADMIN, ROLE_DOCTOR, ROLE_PATIENT}


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a core operation."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
