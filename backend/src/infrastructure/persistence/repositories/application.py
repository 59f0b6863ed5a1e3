"""
Application Repository Implementation
SQLAlchemy-based, owner-scoped data access for applications and their timeline
"""
from contextlib import asynccontextmanager
from datetime import date
from enum import Enum
from typing import Any, AsyncGenerator, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from loguru import logger

from domain.entities import Application, NewApplication, TimelineEntry, normalize_patch
from domain.entities.application import coerce_enum
from domain.enums import ApplicationStatus, LocationType, Platform, SalaryCurrency, SalaryPeriod
from application.repositories.interfaces import IApplicationRepository
from infrastructure.persistence.models import ApplicationModel, ApplicationTimelineModel
from core.exceptions import PersistenceException, RecordNotFoundException, ValidationException


class SQLAlchemyApplicationRepository(IApplicationRepository):
    """
    SQLAlchemy implementation of the application repository.
    
    Each operation runs in its own session and commits before returning,
    so one call is one round trip to the record store.
    """
    
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
    
    @asynccontextmanager
    async def _session(self, action: str) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and maps driver errors"""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except (SQLAlchemyError, OSError) as e:
                await session.rollback()
                logger.error(f"Failed to {action}: {str(e)}")
                raise PersistenceException(f"Failed to {action}: {str(e)}") from e
            except Exception:
                await session.rollback()
                raise
    
    async def _get_scoped(self, session: AsyncSession, application_id: UUID, owner_id: str) -> ApplicationModel:
        result = await session.execute(
            select(ApplicationModel).where(
                ApplicationModel.id == application_id,
                ApplicationModel.wallet_address == owner_id
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            logger.warning(f"Application {application_id} not found for wallet {owner_id}")
            raise RecordNotFoundException("Application", str(application_id))
        return model
    
    async def list_by_owner(self, owner_id: Optional[str]) -> List[Application]:
        """All applications of the owner, newest application date first"""
        if not owner_id:
            return []
        
        async with self._session(f"list applications for wallet {owner_id}") as session:
            result = await session.execute(
                select(ApplicationModel)
                .where(ApplicationModel.wallet_address == owner_id)
                .order_by(ApplicationModel.application_date.desc(), ApplicationModel.created_at.desc())
            )
            models = result.scalars().all()
            return [self._to_entity(m) for m in models]
    
    async def insert(self, owner_id: str, fields: NewApplication) -> Application:
        """Insert a new application; the owner always comes from owner_id"""
        fields = fields.validate()
        
        async with self._session(f"create application for wallet {owner_id}") as session:
            model = self._to_model(owner_id, fields)
            session.add(model)
            await session.flush()
            await session.refresh(model)
            
            logger.info(f"Created application {model.id} ({fields.company_name}) for wallet {owner_id}")
            return self._to_entity(model)
    
    async def update(self, application_id: UUID, owner_id: str, patch: Dict[str, Any]) -> Application:
        """Update the application matching both id and owner"""
        values = normalize_patch(patch)
        
        async with self._session(f"update application {application_id}") as session:
            model = await self._get_scoped(session, application_id, owner_id)
            
            for column, value in values.items():
                if isinstance(value, Enum):
                    value = value.value
                setattr(model, column, value)

            # Companion fields follow the resulting platform / location type
            if model.platform != Platform.OTRO.value:
                model.platform_other = None
            if model.location_type != LocationType.PRESENCIAL.value:
                model.location_city = None

            await session.flush()
            await session.refresh(model)
            
            logger.info(f"Updated application {application_id}: {sorted(values)}")
            return self._to_entity(model)
    
    async def update_status(
        self,
        application_id: UUID,
        owner_id: str,
        new_status: ApplicationStatus,
        note: Optional[str] = None,
        old_status: Optional[ApplicationStatus] = None
    ) -> Application:
        """
        Change status of the application matching id and owner.
        
        Args:
            note: When given, a timeline entry is appended in the same transaction
            old_status: Previous status as known by the caller (not re-queried)
        """
        new_status = coerce_enum(ApplicationStatus, "status", new_status)
        if new_status is None:
            raise ValidationException("status", "is required")
        
        async with self._session(f"update status of application {application_id}") as session:
            model = await self._get_scoped(session, application_id, owner_id)
            model.status = new_status.value
            
            if note and note.strip():
                session.add(ApplicationTimelineModel(
                    application_id=application_id,
                    wallet_address=owner_id,
                    old_status=old_status.value if old_status else None,
                    new_status=new_status.value,
                    notes=note.strip(),
                ))
            
            await session.flush()
            await session.refresh(model)
            
            logger.info(f"Application {application_id} status -> {new_status.value}")
            return self._to_entity(model)
    
    async def remove(self, application_id: UUID, owner_id: str) -> None:
        """Delete the application matching both keys, timeline included"""
        async with self._session(f"delete application {application_id}") as session:
            await self._get_scoped(session, application_id, owner_id)
            
            await session.execute(
                delete(ApplicationTimelineModel).where(
                    ApplicationTimelineModel.application_id == application_id
                )
            )
            await session.execute(
                delete(ApplicationModel).where(
                    ApplicationModel.id == application_id,
                    ApplicationModel.wallet_address == owner_id
                )
            )
            
            logger.info(f"Deleted application {application_id} for wallet {owner_id}")
    
    async def list_timeline(self, application_id: UUID, owner_id: str) -> List[TimelineEntry]:
        """Timeline entries of an application, newest first"""
        async with self._session(f"list timeline of application {application_id}") as session:
            result = await session.execute(
                select(ApplicationTimelineModel)
                .where(
                    ApplicationTimelineModel.application_id == application_id,
                    ApplicationTimelineModel.wallet_address == owner_id
                )
                .order_by(ApplicationTimelineModel.changed_at.desc())
            )
            models = result.scalars().all()
            return [self._timeline_to_entity(m) for m in models]
    
    def _to_model(self, owner_id: str, fields: NewApplication) -> ApplicationModel:
        return ApplicationModel(
            wallet_address=owner_id,
            company_name=fields.company_name,
            position_title=fields.position_title,
            platform=fields.platform.value,
            platform_other=fields.platform_other,
            application_date=fields.application_date or date.today(),
            status=fields.status.value,
            salary_min=fields.salary_min,
            salary_max=fields.salary_max,
            salary_currency=fields.salary_currency.value if fields.salary_currency else None,
            salary_period=fields.salary_period.value if fields.salary_period else None,
            salary_not_specified=fields.salary_not_specified,
            location_type=fields.location_type.value if fields.location_type else None,
            location_city=fields.location_city,
            job_url=fields.job_url,
            personal_notes=fields.personal_notes,
            is_priority=fields.is_priority,
        )
    
    def _to_entity(self, model: ApplicationModel) -> Application:
        return Application(
            id=model.id,
            wallet_address=model.wallet_address,
            company_name=model.company_name,
            position_title=model.position_title,
            platform=Platform(model.platform),
            platform_other=model.platform_other,
            application_date=model.application_date,
            status=ApplicationStatus(model.status),
            salary_min=model.salary_min,
            salary_max=model.salary_max,
            salary_currency=SalaryCurrency(model.salary_currency) if model.salary_currency else None,
            salary_period=SalaryPeriod(model.salary_period) if model.salary_period else None,
            salary_not_specified=bool(model.salary_not_specified),
            location_type=LocationType(model.location_type) if model.location_type else None,
            location_city=model.location_city,
            job_url=model.job_url,
            personal_notes=model.personal_notes,
            is_priority=bool(model.is_priority),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
    
    def _timeline_to_entity(self, model: ApplicationTimelineModel) -> TimelineEntry:
        return TimelineEntry(
            id=model.id,
            application_id=model.application_id,
            old_status=ApplicationStatus(model.old_status) if model.old_status else None,
            new_status=ApplicationStatus(model.new_status),
            notes=model.notes,
            changed_at=model.changed_at,
        )
