from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func

from resourcio.database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, server_default="active")  # draft | active | closure | rejected
    priority = Column(String(20), nullable=False, server_default="medium")
    type = Column(String(20), nullable=False, server_default="business")

    director_id = Column(Integer, ForeignKey("resources.id", ondelete="SET NULL"), nullable=True)
    change_lead_id = Column(Integer, ForeignKey("resources.id", ondelete="SET NULL"), nullable=True)
    business_lead_id = Column(Integer, ForeignKey("resources.id", ondelete="SET NULL"), nullable=True)

    estimated_hours = Column(Numeric(8, 2), nullable=True, server_default="0.00")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
