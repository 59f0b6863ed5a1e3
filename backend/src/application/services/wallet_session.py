"""
Wallet Session
Current owner identity and change notifications
"""
from typing import Awaitable, Callable, List, Optional

from loguru import logger

from domain.value_objects import WalletAddress


OwnerListener = Callable[[Optional[str]], Awaitable[None]]


class WalletSession:
    """
    Holds the connected wallet address (or None).
    
    The wallet handshake happens elsewhere; this only records the result
    and tells subscribers about every change.
    
    Usage:
        session = WalletSession()
        unsubscribe = session.subscribe(state.set_owner)
        await session.connect("GABC...")
        await session.disconnect()
    """
    
    def __init__(self):
        self._address: Optional[str] = None
        self._listeners: List[OwnerListener] = []
    
    @property
    def address(self) -> Optional[str]:
        return self._address
    
    @property
    def is_connected(self) -> bool:
        return self._address is not None
    
    def subscribe(self, listener: OwnerListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it"""
        self._listeners.append(listener)
        
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    async def connect(self, address: str) -> None:
        """Record a connected wallet"""
        wallet = WalletAddress(address)
        if wallet.value == self._address:
            return
        self._address = wallet.value
        logger.info(f"Wallet connected: {wallet}")
        await self._notify()
    
    async def disconnect(self) -> None:
        if self._address is None:
            return
        logger.info(f"Wallet disconnected: {self._address}")
        self._address = None
        await self._notify()
    
    async def _notify(self) -> None:
        # Listeners run in subscription order
        for listener in list(self._listeners):
            await listener(self._address)
