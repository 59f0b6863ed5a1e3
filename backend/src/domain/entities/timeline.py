"""
Timeline Entry Domain Entity
Append-only record of a status change
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from ..enums import ApplicationStatus, get_status_label


@dataclass(frozen=True)
class TimelineEntry:
    """Status transition of an application - never updated"""
    
    id: UUID
    application_id: UUID
    new_status: ApplicationStatus
    old_status: Optional[ApplicationStatus] = None
    notes: Optional[str] = None
    changed_at: Optional[datetime] = None
    
    def describe(self) -> str:
        """Human readable transition"""
        if self.old_status is None:
            return get_status_label(self.new_status)
        return f"{get_status_label(self.old_status)} → {get_status_label(self.new_status)}"
