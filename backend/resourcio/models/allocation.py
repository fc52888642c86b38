from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func

from resourcio.database import Base
from resourcio.models.resource import JSONType


class ResourceAllocation(Base):
    __tablename__ = "resource_allocations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False, index=True)
    allocated_hours = Column(Numeric(5, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    role = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, server_default="active")  # active | planned | completed
    # {"2025-W34": 12.5, ...} overrides allocated_hours for that ISO week
    weekly_allocations = Column(JSONType, nullable=True, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
