"""
Salary Range Value Object
Immutable offered salary with currency and period
"""
from dataclasses import dataclass
from typing import Optional

from ..enums import SalaryCurrency, SalaryPeriod


@dataclass(frozen=True)
class SalaryRange:
    """Offered salary value object"""
    
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    currency: Optional[SalaryCurrency] = None
    period: Optional[SalaryPeriod] = None
    not_specified: bool = False
    
    def __post_init__(self):
        """Validate salary range"""
        if self.min_amount is not None and self.min_amount < 0:
            raise ValueError("Minimum salary cannot be negative")
        
        if self.max_amount is not None and self.max_amount < 0:
            raise ValueError("Maximum salary cannot be negative")

    @property
    def is_inverted(self) -> bool:
        """Maximum given below minimum"""
        return (
            self.min_amount is not None
            and self.max_amount is not None
            and self.max_amount < self.min_amount
        )

    @property
    def is_empty(self) -> bool:
        """No amount was given"""
        return self.min_amount is None and self.max_amount is None
    
    def contains(self, amount: float) -> bool:
        """Check if amount falls within range"""
        if self.is_empty:
            return False
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        return True
    
    def __str__(self) -> str:
        if self.not_specified or self.is_empty:
            return "No especificado"
        
        currency = self.currency.value if self.currency else ""
        if self.min_amount is not None and self.max_amount is not None:
            text = f"${self.min_amount:,.0f} - ${self.max_amount:,.0f}"
        elif self.min_amount is not None:
            text = f"${self.min_amount:,.0f}+"
        else:
            text = f"hasta ${self.max_amount:,.0f}"
        
        parts = [text]
        if currency:
            parts.append(currency)
        if self.period:
            parts.append(f"/{self.period.value}")
        return " ".join(parts)
