"""
Applications State Container
Per-owner in-memory cache of applications that mediates every mutation
"""
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple, Union, TYPE_CHECKING
from uuid import UUID

from core.config import settings
from core.exceptions import NotAuthenticatedException, PersistenceException
from core.logging_config import wallet_logger
from domain.entities import Application, NewApplication, TimelineEntry
from domain.enums import ApplicationStatus, LocationType, Platform
from application.repositories.interfaces import IApplicationRepository
from . import statistics
from .statistics import ApplicationStats, PlatformStat, StatusSlice

if TYPE_CHECKING:
    from application.services.wallet_session import WalletSession


class LoadState(str, Enum):
    """Lifecycle of the cached list"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class ApplicationsState:
    """
    Authoritative in-memory list of the current owner's applications.
    
    The repository response is the only source of truth for a mutated
    record: the cache is touched after the round trip succeeds, never
    before, and is left as is when it fails.
    
    Late responses are guarded four ways:
    - owner epoch: anything resolving after an owner change is dropped
    - load sequence: only the most recent load() replaces the list
    - tombstones: ids removed in this epoch are filtered from later loads
    - mutation sequence: records written while a load was in flight are
      laid over its result, so the load cannot revert or drop them
    
    Usage:
        state = ApplicationsState(repository)
        await state.set_owner(wallet_address)
        created = await state.create({"company_name": "Acme", ...})
        stats = state.get_stats()
    """
    
    def __init__(
        self,
        repository: IApplicationRepository,
        load_error_message: Optional[str] = None
    ):
        self._repository = repository
        self._load_error_message = load_error_message or settings.LOAD_ERROR_MESSAGE
        
        self._owner_id: Optional[str] = None
        self._applications: List[Application] = []
        self._state = LoadState.UNINITIALIZED
        self._error: Optional[str] = None
        
        self._epoch = 0
        self._load_seq = 0
        self._tombstones: Set[UUID] = set()
        # id -> (mutation seq, record) written by this container in the current epoch
        self._mutation_seq = 0
        self._written: Dict[UUID, Tuple[int, Application]] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None
    
    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    
    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id
    
    @property
    def applications(self) -> Tuple[Application, ...]:
        """Immutable snapshot of the cached list"""
        return tuple(self._applications)
    
    @property
    def state(self) -> LoadState:
        return self._state
    
    @property
    def loading(self) -> bool:
        return self._state == LoadState.LOADING
    
    @property
    def error(self) -> Optional[str]:
        return self._error
    
    def get(self, application_id: UUID) -> Optional[Application]:
        """Cached record by id"""
        for app in self._applications:
            if app.id == application_id:
                return app
        return None
    
    def __len__(self) -> int:
        return len(self._applications)
    
    # ------------------------------------------------------------------
    # Owner identity
    # ------------------------------------------------------------------
    
    async def bind(self, session: "WalletSession") -> None:
        """Follow the wallet session: every connect/disconnect resets the cache"""
        self.unbind()
        self._unsubscribe = session.subscribe(self.set_owner)
        await self.set_owner(session.address)
    
    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
    
    async def set_owner(self, owner_id: Optional[str]) -> None:
        """
        Switch to another owner.
        
        The previous owner's records are cleared before anything is loaded.
        A failed load is kept in `error`/`state` rather than raised.
        """
        if owner_id == self._owner_id and self._state != LoadState.UNINITIALIZED:
            return
        
        previous = self._owner_id
        self._owner_id = owner_id
        self._epoch += 1
        self._applications = []
        self._tombstones = set()
        self._written = {}
        self._error = None
        self._log.info(f"Applications owner changed: {previous} -> {owner_id}")
        
        if owner_id is None:
            self._state = LoadState.READY
            return
        
        self._state = LoadState.UNINITIALIZED
        try:
            await self.load()
        except PersistenceException as e:
            self._log.warning(f"Initial load failed: {e}")
    
    @property
    def _log(self):
        return wallet_logger(self._owner_id)

    def _require_owner(self) -> str:
        if not self._owner_id:
            raise NotAuthenticatedException()
        return self._owner_id
    
    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    
    async def load(self) -> None:
        """
        Replace the cache with the owner's full list.
        
        On failure the last good list is kept, `error` holds a user-facing
        message and the PersistenceException is re-raised.
        """
        owner_id = self._owner_id
        if owner_id is None:
            self._applications = []
            self._error = None
            self._state = LoadState.READY
            return
        
        epoch = self._epoch
        self._load_seq += 1
        seq = self._load_seq
        mutations_at_start = self._mutation_seq
        self._state = LoadState.LOADING
        
        try:
            records = await self._repository.list_by_owner(owner_id)
        except PersistenceException as e:
            self._log.error(f"Error fetching applications: {e}")
            if epoch == self._epoch and seq == self._load_seq:
                self._error = self._load_error_message
                self._state = LoadState.ERRORED
            raise
        
        if epoch != self._epoch or seq != self._load_seq:
            self._log.debug("Discarding superseded load")
            return
        
        self._applications = self._merge_written(records, mutations_at_start)
        self._error = None
        self._state = LoadState.READY
        self._log.info(f"Loaded {len(self._applications)} applications")
    
    def _merge_written(self, records: List[Application], since: int) -> List[Application]:
        """
        Lay records written after mutation `since` over a fetched list.
        
        Written records replace their fetched version; those the fetch did
        not see (created meanwhile) go first, newest first.
        """
        newer = {
            app_id: (mutation, record)
            for app_id, (mutation, record) in self._written.items()
            if mutation > since
        }
        # Older writes are already reflected in the fetched rows
        self._written = newer
        
        merged = []
        for record in records:
            if record.id in self._tombstones:
                continue
            entry = newer.get(record.id)
            merged.append(entry[1] if entry else record)
        
        fetched_ids = {r.id for r in records}
        unseen = sorted(
            (entry for app_id, entry in newer.items() if app_id not in fetched_ids),
            key=lambda entry: entry[0],
            reverse=True
        )
        if unseen:
            self._log.debug(f"Keeping {len(unseen)} records written during the load")
        return [record for _, record in unseen] + merged
    
    async def refresh(self) -> None:
        """Explicit reload (alias of load)"""
        await self.load()
    
    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    
    async def create(self, fields: Union[NewApplication, Mapping[str, Any]]) -> Application:
        """Create an application and put it at the front of the list"""
        owner_id = self._require_owner()
        draft = fields if isinstance(fields, NewApplication) else NewApplication.from_dict(fields)
        draft = draft.validate()
        
        epoch = self._epoch
        created = await self._repository.insert(owner_id, draft)
        
        if epoch == self._epoch:
            self._record_write(created)
            self._applications.insert(0, created)
        else:
            self._log.warning(f"Owner changed while creating {created.id}; not cached")
        return created
    
    async def update(self, application_id: UUID, patch: Mapping[str, Any]) -> Application:
        """Full update; the record is replaced in place"""
        owner_id = self._require_owner()
        
        epoch = self._epoch
        updated = await self._repository.update(application_id, owner_id, dict(patch))
        
        if epoch == self._epoch:
            self._replace(updated)
        return updated
    
    async def update_status(
        self,
        application_id: UUID,
        status: ApplicationStatus,
        note: Optional[str] = None
    ) -> Application:
        """
        Quick status change.
        
        The timeline's previous status comes from the cached record; when the
        record is not cached it is recorded as absent.
        """
        owner_id = self._require_owner()
        
        current = self.get(application_id)
        if current is None:
            self._log.warning(f"Application {application_id} not cached, previous status unknown")
        old_status = current.status if current else None
        
        epoch = self._epoch
        updated = await self._repository.update_status(
            application_id,
            owner_id,
            status,
            note=note,
            old_status=old_status
        )
        
        if epoch == self._epoch:
            self._replace(updated)
        return updated
    
    async def remove(self, application_id: UUID) -> None:
        """Delete an application"""
        owner_id = self._require_owner()
        
        epoch = self._epoch
        await self._repository.remove(application_id, owner_id)
        
        if epoch == self._epoch:
            self._mutation_seq += 1
            self._written.pop(application_id, None)
            self._tombstones.add(application_id)
            self._applications = [a for a in self._applications if a.id != application_id]
    
    def _record_write(self, record: Application) -> None:
        self._mutation_seq += 1
        self._written[record.id] = (self._mutation_seq, record)
    
    def _replace(self, record: Application) -> None:
        # Replace only; a record removed meanwhile stays removed
        if record.id in self._tombstones:
            return
        self._record_write(record)
        self._applications = [record if a.id == record.id else a for a in self._applications]
    
    async def get_timeline(self, application_id: UUID) -> List[TimelineEntry]:
        """Status history, not cached"""
        if not self._owner_id:
            return []
        return await self._repository.list_timeline(application_id, self._owner_id)
    
    # ------------------------------------------------------------------
    # Read views (recomputed from the current list on every call)
    # ------------------------------------------------------------------
    
    def get_stats(self, today: Optional[date] = None) -> ApplicationStats:
        return statistics.compute_stats(self._applications, today)
    
    def get_company_names(self) -> List[str]:
        return statistics.company_names(self._applications)
    
    def get_by_status(self, status: ApplicationStatus) -> List[Application]:
        return statistics.by_status(self._applications, status)
    
    def get_platform_stats(self) -> List[PlatformStat]:
        return statistics.platform_stats(self._applications)
    
    def get_monthly_counts(self, year: Optional[int] = None) -> List[int]:
        return statistics.monthly_counts(self._applications, year or date.today().year)
    
    def get_status_distribution(self) -> List[StatusSlice]:
        return statistics.status_distribution(self._applications)
    
    def filter(
        self,
        search: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
        platform: Optional[Platform] = None,
        location_type: Optional[LocationType] = None
    ) -> List[Application]:
        return statistics.filter_applications(
            self._applications,
            search=search,
            status=status,
            platform=platform,
            location_type=location_type
        )
