"""
Repository Interfaces (Abstract Base Classes)
Define contracts for data access without implementation details
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID

from domain.entities import Application, NewApplication, TimelineEntry
from domain.enums import ApplicationStatus


class IApplicationRepository(ABC):
    """
    Application repository interface.
    
    Every call is scoped by owner (wallet address). No caching, no retries;
    failures surface as PersistenceException.
    """
    
    @abstractmethod
    async def list_by_owner(self, owner_id: Optional[str]) -> List[Application]:
        """All applications of the owner, newest application date first"""
        pass
    
    @abstractmethod
    async def insert(self, owner_id: str, fields: NewApplication) -> Application:
        """Insert a new application owned by owner_id"""
        pass
    
    @abstractmethod
    async def update(self, application_id: UUID, owner_id: str, patch: Dict[str, Any]) -> Application:
        """Update the application matching both id and owner"""
        pass
    
    @abstractmethod
    async def update_status(
        self,
        application_id: UUID,
        owner_id: str,
        new_status: ApplicationStatus,
        note: Optional[str] = None,
        old_status: Optional[ApplicationStatus] = None
    ) -> Application:
        """Change status; append a timeline entry when a note is given"""
        pass
    
    @abstractmethod
    async def remove(self, application_id: UUID, owner_id: str) -> None:
        """Delete the application matching both id and owner"""
        pass
    
    @abstractmethod
    async def list_timeline(self, application_id: UUID, owner_id: str) -> List[TimelineEntry]:
        """Timeline entries of an application, newest first"""
        pass
