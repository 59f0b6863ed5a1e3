"""
Location Value Object
Work modality with an optional city
"""
from dataclasses import dataclass
from typing import Optional

from ..enums import LocationType


@dataclass(frozen=True)
class Location:
    """Job location value object"""
    
    type: LocationType
    city: Optional[str] = None
    
    def __post_init__(self):
        # City only applies to on-site jobs
        if self.type != LocationType.PRESENCIAL and self.city is not None:
            object.__setattr__(self, "city", None)
        elif self.city is not None and not self.city.strip():
            object.__setattr__(self, "city", None)
    
    def __str__(self) -> str:
        if self.city:
            return f"{self.type.value} ({self.city})"
        return self.type.value
