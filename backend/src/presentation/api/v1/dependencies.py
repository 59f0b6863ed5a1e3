"""
FastAPI Dependencies
Wallet identity and per-wallet state
"""
from fastapi import Depends, Request

from core.config import settings
from core.exceptions import NotAuthenticatedException
from domain.value_objects import WalletAddress
from application.services.application_tracking import ApplicationsState, ApplicationsStateRegistry
from .container import get_applications_registry


async def get_wallet_address(request: Request) -> str:
    """
    Get connected wallet from the wallet header
    
    Usage:
        @router.get("/protected")
        async def protected_route(wallet: str = Depends(get_wallet_address)):
            ...
    """
    address = request.headers.get(settings.WALLET_HEADER)
    if not address:
        raise NotAuthenticatedException(f"Missing {settings.WALLET_HEADER} header")
    
    address = address.strip()
    if not WalletAddress.is_valid(address):
        raise NotAuthenticatedException("Invalid wallet address")
    
    return address


async def get_applications_state(
    wallet_address: str = Depends(get_wallet_address),
    registry: ApplicationsStateRegistry = Depends(get_applications_registry)
) -> ApplicationsState:
    """State container of the connected wallet"""
    return await registry.get(wallet_address)
