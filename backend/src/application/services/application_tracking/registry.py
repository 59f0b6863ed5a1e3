"""
Applications State Registry
One state container per active wallet for the HTTP surface
"""
import asyncio
from collections import OrderedDict
from typing import Dict, Optional

from loguru import logger

from core.config import settings
from core.exceptions import PersistenceException
from application.repositories.interfaces import IApplicationRepository
from .state import ApplicationsState, LoadState


class ApplicationsStateRegistry:
    """
    Hands out the state container of a wallet, loading it on first use.
    
    At most `max_size` containers are kept; the least recently used one is
    dropped when a new wallet shows up. Loads are serialized per wallet
    only, so a slow wallet never holds up the others.
    """
    
    def __init__(self, repository: IApplicationRepository, max_size: Optional[int] = None):
        self._repository = repository
        self._max_size = max_size or settings.STATE_REGISTRY_MAX_SIZE
        self._states: "OrderedDict[str, ApplicationsState]" = OrderedDict()
        self._locks: Dict[str, asyncio.Lock] = {}
    
    async def get(self, owner_id: str) -> ApplicationsState:
        """
        Get the container for owner_id.
        
        A container that was never loaded is loaded here, one whose last
        load failed is retried.
        """
        state = self._states.get(owner_id)
        if state is None:
            state = ApplicationsState(self._repository)
            self._states[owner_id] = state
            self._locks[owner_id] = asyncio.Lock()
            self._evict()
        else:
            self._states.move_to_end(owner_id)
        lock = self._locks[owner_id]
        
        async with lock:
            if state.state == LoadState.UNINITIALIZED:
                await state.set_owner(owner_id)
            elif state.state == LoadState.ERRORED:
                try:
                    await state.load()
                except PersistenceException as e:
                    logger.warning(f"Retry load for wallet {owner_id} failed: {e}")
        return state
    
    def _evict(self) -> None:
        while len(self._states) > self._max_size:
            owner_id, state = self._states.popitem(last=False)
            self._locks.pop(owner_id, None)
            state.unbind()
            logger.info(f"Evicted applications state for wallet {owner_id}")
    
    def discard(self, owner_id: str) -> None:
        """Forget a wallet (disconnect)"""
        self._locks.pop(owner_id, None)
        if self._states.pop(owner_id, None) is not None:
            logger.info(f"Discarded applications state for wallet {owner_id}")
    
    def __contains__(self, owner_id: str) -> bool:
        return owner_id in self._states
    
    def __len__(self) -> int:
        return len(self._states)
