from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, JSON, true, false
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from resourcio.database import Base

JSONType = JSON().with_variant(JSONB, "postgresql")

DEFAULT_DEPARTMENT = "IT Architecture & Delivery"


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(200), nullable=False, server_default="")
    department = Column(String(200), nullable=False, server_default=DEFAULT_DEPARTMENT)
    skills = Column(JSONType, nullable=True, default=list)
    weekly_capacity = Column(Numeric(5, 2), nullable=False, server_default="40.00")
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
