"""Value Objects - Immutable objects defined by their attributes"""

from .salary_range import SalaryRange
from .location import Location
from .wallet_address import WalletAddress
__all__ = [
    "SalaryRange",
    "Location",
    "WalletAddress",
]
