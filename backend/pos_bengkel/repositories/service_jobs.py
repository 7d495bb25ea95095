from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select

from ..models import ServiceJob, ServiceJobHistory
from ..models.services import QUEUE_STATUSES
from ..time_utils import end_of_day, start_of_day
from .base import SQLAlchemyRepository


class ServiceJobRepository(SQLAlchemyRepository):
    def __init__(self, session_factory):
        super().__init__(ServiceJob, session_factory, label="Service job")

    def next_queue_number(self, outlet_id: int, received_at: datetime) -> int:
        """One past the highest queue number the outlet handed out on that UTC day."""
        stmt = select(func.coalesce(func.max(ServiceJob.queue_number), 0)).where(
            ServiceJob.outlet_id == outlet_id,
            ServiceJob.received_at >= start_of_day(received_at),
            ServiceJob.received_at <= end_of_day(received_at),
        )
        return self._run(lambda: self.session.execute(stmt).scalar_one()) + 1

    def queue(self, outlet_id: int, day: Optional[datetime] = None) -> list:
        """Jobs still waiting or in work at the outlet, in queue order."""
        criteria = [ServiceJob.outlet_id == outlet_id, ServiceJob.status.in_(QUEUE_STATUSES)]
        if day is not None:
            criteria += [ServiceJob.received_at >= start_of_day(day), ServiceJob.received_at <= end_of_day(day)]
        stmt = select(ServiceJob).where(*criteria).order_by(ServiceJob.queue_number.asc(), ServiceJob.id.asc())
        return self._run(lambda: list(self.session.execute(stmt).scalars()))

    def add_history(self, job: ServiceJob, *, user_id: Optional[int] = None, notes: Optional[str] = None):
        history = ServiceJobHistory(service_job_id=job.id, user_id=user_id, status=job.status, notes=notes)
        self.session.add(history)
        self._flush({})
        return history

    def histories(self, job_id: int) -> list:
        stmt = (
            select(ServiceJobHistory)
            .where(ServiceJobHistory.service_job_id == job_id)
            .order_by(ServiceJobHistory.id.asc())
        )
        return self._run(lambda: list(self.session.execute(stmt).scalars()))
