"""
Application Timeline ORM Model
Append-only status change history
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid

from core.database import Base
from .application import utcnow


class ApplicationTimelineModel(Base):
    """Status change history table ORM model"""
    
    __tablename__ = "application_timeline"
    
    # Primary Key
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    
    # Foreign Keys
    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    wallet_address = Column(String(128), nullable=False, index=True)
    
    # Transition
    old_status = Column(String(50), nullable=True)  # NULL for the first recorded change
    new_status = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    
    changed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    
    def __repr__(self):
        return f"<ApplicationTimelineModel {self.application_id} {self.old_status} -> {self.new_status}>"
