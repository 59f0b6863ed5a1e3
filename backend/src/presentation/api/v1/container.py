"""
Dependency Injection Container
Manages service and repository instances
"""
from core.database import AsyncSessionLocal
from application.repositories.interfaces import IApplicationRepository
from application.services.application_tracking import ApplicationsStateRegistry
from infrastructure.persistence.repositories.application import SQLAlchemyApplicationRepository


# Singleton instances
_application_repository: IApplicationRepository | None = None
_applications_registry: ApplicationsStateRegistry | None = None


def get_application_repository() -> IApplicationRepository:
    """Get application repository instance (singleton)"""
    global _application_repository
    if _application_repository is None:
        _application_repository = SQLAlchemyApplicationRepository(AsyncSessionLocal)
    return _application_repository


def get_applications_registry() -> ApplicationsStateRegistry:
    """Get per-wallet state registry (singleton)"""
    global _applications_registry
    if _applications_registry is None:
        _applications_registry = ApplicationsStateRegistry(get_application_repository())
    return _applications_registry
