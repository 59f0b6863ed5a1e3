"""
Wallet Address Value Object
Opaque owner identity supplied by the wallet connection
"""
from dataclasses import dataclass


MAX_WALLET_ADDRESS_LENGTH = 128


@dataclass(frozen=True)
class WalletAddress:
    """Wallet address value object with validation"""
    
    value: str
    
    def __post_init__(self):
        """Validate address format"""
        if not self.is_valid(self.value):
            raise ValueError(f"Invalid wallet address: {self.value!r}")
    
    @staticmethod
    def is_valid(address: str) -> bool:
        """Non-empty, no whitespace, bounded length"""
        if not isinstance(address, str) or not address:
            return False
        if len(address) > MAX_WALLET_ADDRESS_LENGTH:
            return False
        return not any(ch.isspace() for ch in address)
    
    def __str__(self) -> str:
        return self.value
    
    def __repr__(self) -> str:
        return f"WalletAddress({self.value})"
