"""
Application ORM Model
SQLAlchemy model for job applications
"""
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, String, Text, Uuid

from core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationModel(Base):
    """Job application table ORM model"""
    
    __tablename__ = "applications"
    
    # Primary Key
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    
    # Owner (row-level scope)
    wallet_address = Column(String(128), nullable=False, index=True)
    
    # Application Details
    company_name = Column(String(255), nullable=False)
    position_title = Column(String(255), nullable=False)
    platform = Column(String(50), nullable=False, index=True)
    platform_other = Column(String(255), nullable=True)
    application_date = Column(Date, nullable=False, default=date.today, index=True)
    status = Column(String(50), nullable=False, default="pendiente", index=True)
    
    # Compensation
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(3), nullable=True)
    salary_period = Column(String(20), nullable=True)
    salary_not_specified = Column(Boolean, nullable=False, default=False)
    
    # Location
    location_type = Column(String(20), nullable=True)
    location_city = Column(String(255), nullable=True)
    
    # Metadata
    job_url = Column(String(1000), nullable=True)
    personal_notes = Column(Text, nullable=True)
    is_priority = Column(Boolean, nullable=False, default=False)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    
    def __repr__(self):
        return f"<ApplicationModel {self.id} - {self.status}>"
