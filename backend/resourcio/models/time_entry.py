from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from resourcio.database import Base


WEEKDAY_COLUMNS = (
    "monday_hours",
    "tuesday_hours",
    "wednesday_hours",
    "thursday_hours",
    "friday_hours",
    "saturday_hours",
    "sunday_hours",
)


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        UniqueConstraint("resource_id", "allocation_id", "week_start_date", name="uq_time_entry_week"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False, index=True)
    allocation_id = Column(Integer, ForeignKey("resource_allocations.id", ondelete="CASCADE"), nullable=False)
    week_start_date = Column(Date, nullable=False)  # Monday of the ISO week
    monday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    tuesday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    wednesday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    thursday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    friday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    saturday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    sunday_hours = Column(Numeric(4, 2), nullable=False, server_default="0.00")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def total_hours(self) -> float:
        return sum(float(getattr(self, col) or 0) for col in WEEKDAY_COLUMNS)


class WeeklySubmission(Base):
    __tablename__ = "weekly_submissions"
    __table_args__ = (
        UniqueConstraint("resource_id", "week_start_date", name="uq_weekly_submission"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, server_default="draft")  # draft | submitted
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    total_hours = Column(Numeric(5, 2), nullable=False, server_default="0.00")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
