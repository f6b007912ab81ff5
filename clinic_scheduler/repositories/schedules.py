from sqlalchemy.orm import Session

from clinic_scheduler.models.schedule import ScheduleBlock
from clinic_scheduler.scheduling.intervals import DAYS_OF_WEEK


class ScheduleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, block: ScheduleBlock) -> ScheduleBlock:
        self.db.add(block)
        self.db.flush()
        return block

    def update(self, block: ScheduleBlock) -> ScheduleBlock:
        self.db.add(block)
        self.db.flush()
        return block

    def delete(self, block: ScheduleBlock) -> None:
        self.db.delete(block)
        self.db.flush()

    def find_by_id(self, schedule_id: int) -> ScheduleBlock | None:
        return self.db.query(ScheduleBlock).filter(ScheduleBlock.id == schedule_id).first()

    def find_by_doctor_and_day(self, doctor_id: int, day_of_week: str, active_only: bool = False) -> list[ScheduleBlock]:
        query = self.db.query(ScheduleBlock).filter(
            ScheduleBlock.doctor_id == doctor_id,
            ScheduleBlock.day_of_week == day_of_week,
        )
        if active_only:
            query = query.filter(ScheduleBlock.active.is_(True))

        # HH:MM strings sort chronologically.
        return query.order_by(ScheduleBlock.start_time.asc(), ScheduleBlock.id.asc()).all()

    def find_by_doctor(self, doctor_id: int) -> list[ScheduleBlock]:
        blocks = self.db.query(ScheduleBlock).filter(ScheduleBlock.doctor_id == doctor_id).all()
        return sorted(blocks, key=lambda block: (DAYS_OF_WEEK.index(block.day_of_week), block.start_time, block.id))
