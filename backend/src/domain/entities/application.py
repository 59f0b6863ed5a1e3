"""
Application Domain Entity
Immutable job application record plus the field sets used to create and edit it
"""
from dataclasses import dataclass, fields as dataclass_fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Type
from uuid import UUID

from core.exceptions import ValidationException
from ..enums import (
    ApplicationStatus,
    LocationType,
    Platform,
    SalaryCurrency,
    SalaryPeriod,
    INTERVIEW_STATUSES,
    RESPONDED_STATUSES,
    get_platform_label,
    get_status_label,
)
from ..value_objects import Location, SalaryRange


# Descriptive fields a user must always provide
REQUIRED_FIELDS = ("company_name", "position_title", "platform")

# Assigned by the record store or the session, never by the user
PROTECTED_FIELDS: FrozenSet[str] = frozenset({"id", "wallet_address", "created_at", "updated_at"})

UPDATABLE_FIELDS: FrozenSet[str] = frozenset({
    "company_name",
    "position_title",
    "platform",
    "platform_other",
    "application_date",
    "status",
    "salary_min",
    "salary_max",
    "salary_currency",
    "salary_period",
    "salary_not_specified",
    "location_type",
    "location_city",
    "job_url",
    "personal_notes",
    "is_priority",
})

_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "status": ApplicationStatus,
    "platform": Platform,
    "salary_currency": SalaryCurrency,
    "salary_period": SalaryPeriod,
    "location_type": LocationType,
}


def coerce_enum(enum_cls: Type[Enum], field: str, value: Any) -> Optional[Enum]:
    """Convert a raw value to enum_cls, None passes through"""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationException(field, f"must be one of: {allowed}")


def _coerce_date(field: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationException(field, "must be a date in YYYY-MM-DD format")


def _coerce_amount(field: str, value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationException(field, "must be a number")
    if amount < 0:
        raise ValidationException(field, "cannot be negative")
    return amount


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _optional_text(field: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationException(field, "must be text")
    value = value.strip()
    return value or None


def _required_text(field: str, value: Any) -> str:
    text = _optional_text(field, value)
    if text is None:
        raise ValidationException(field, "is required")
    return text


@dataclass(frozen=True)
class Application:
    """Job application domain entity - immutable"""
    
    id: UUID
    wallet_address: str
    
    # Descriptive
    company_name: str
    position_title: str
    platform: Platform
    application_date: date
    status: ApplicationStatus = ApplicationStatus.PENDIENTE
    platform_other: Optional[str] = None
    
    # Compensation
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[SalaryCurrency] = None
    salary_period: Optional[SalaryPeriod] = None
    salary_not_specified: bool = False
    
    # Location
    location_type: Optional[LocationType] = None
    location_city: Optional[str] = None
    
    # Metadata
    job_url: Optional[str] = None
    personal_notes: Optional[str] = None
    is_priority: bool = False
    
    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    def __post_init__(self):
        """Validate application data"""
        if not self.wallet_address or len(self.wallet_address.strip()) == 0:
            raise ValueError("Wallet address cannot be empty")
    
    @property
    def salary(self) -> Optional[SalaryRange]:
        """Offered salary, None when nothing was recorded"""
        if self.salary_min is None and self.salary_max is None and not self.salary_not_specified:
            return None
        return SalaryRange(
            min_amount=self.salary_min,
            max_amount=self.salary_max,
            currency=self.salary_currency,
            period=self.salary_period,
            not_specified=self.salary_not_specified,
        )
    
    @property
    def location(self) -> Optional[Location]:
        if self.location_type is None:
            return None
        return Location(type=self.location_type, city=self.location_city)
    
    @property
    def status_label(self) -> str:
        return get_status_label(self.status)
    
    @property
    def platform_label(self) -> str:
        """Platform display name, free text wins for 'otro'"""
        if self.platform == Platform.OTRO and self.platform_other:
            return self.platform_other
        return get_platform_label(self.platform)
    
    def has_response(self) -> bool:
        """Check if the company answered in any way"""
        return self.status in RESPONDED_STATUSES
    
    def has_interview(self) -> bool:
        """Check if the application reached an interview or offer"""
        return self.status in INTERVIEW_STATUSES
    
    def matches_search(self, query: str) -> bool:
        """Case-insensitive substring match on company or position"""
        needle = query.lower()
        return needle in self.company_name.lower() or needle in self.position_title.lower()
    
    def __str__(self) -> str:
        return f"Application({self.id}, {self.company_name}, status={self.status.value})"


@dataclass(frozen=True)
class NewApplication:
    """Fields submitted by the user to create an application"""
    
    company_name: str
    position_title: str
    platform: Platform
    application_date: Optional[date] = None
    status: ApplicationStatus = ApplicationStatus.PENDIENTE
    platform_other: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[SalaryCurrency] = None
    salary_period: Optional[SalaryPeriod] = None
    salary_not_specified: bool = False
    location_type: Optional[LocationType] = None
    location_city: Optional[str] = None
    job_url: Optional[str] = None
    personal_notes: Optional[str] = None
    is_priority: bool = False
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewApplication":
        """
        Build from a raw mapping (form payload).
        
        Owner and server-assigned keys are dropped; the owner always
        comes from the connected wallet.
        """
        known = {f.name for f in dataclass_fields(cls)}
        values = {}
        for key, value in data.items():
            if key in PROTECTED_FIELDS:
                continue
            if key not in known:
                raise ValidationException(key, "unknown field")
            values[key] = value
        
        for field in REQUIRED_FIELDS:
            if _blank(values.get(field)):
                raise ValidationException(field, "is required")
        
        if values.get("status") is None:
            values.pop("status", None)
        for flag in ("salary_not_specified", "is_priority"):
            if values.get(flag) is None:
                values.pop(flag, None)
        return cls(**values)
    
    def validate(self) -> "NewApplication":
        """
        Check required fields and normalize typed values.
        
        Returns:
            Normalized copy; raises ValidationException on bad input
        """
        for field in REQUIRED_FIELDS:
            if _blank(getattr(self, field)):
                raise ValidationException(field, "is required")
        
        platform = coerce_enum(Platform, "platform", self.platform)
        location_type = coerce_enum(LocationType, "location_type", self.location_type)
        
        return replace(
            self,
            company_name=_required_text("company_name", self.company_name),
            position_title=_required_text("position_title", self.position_title),
            platform=platform,
            platform_other=_optional_text("platform_other", self.platform_other) if platform == Platform.OTRO else None,
            application_date=(
                _coerce_date("application_date", self.application_date)
                if self.application_date is not None else None
            ),
            status=coerce_enum(ApplicationStatus, "status", self.status),
            salary_min=_coerce_amount("salary_min", self.salary_min),
            salary_max=_coerce_amount("salary_max", self.salary_max),
            salary_currency=coerce_enum(SalaryCurrency, "salary_currency", self.salary_currency),
            salary_period=coerce_enum(SalaryPeriod, "salary_period", self.salary_period),
            salary_not_specified=bool(self.salary_not_specified),
            location_type=location_type,
            location_city=(
                _optional_text("location_city", self.location_city)
                if location_type == LocationType.PRESENCIAL else None
            ),
            job_url=_optional_text("job_url", self.job_url),
            personal_notes=_optional_text("personal_notes", self.personal_notes),
            is_priority=bool(self.is_priority),
        )


def normalize_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a full-update patch.
    
    Only UPDATABLE_FIELDS may appear, required fields cannot be blanked
    and enum fields are coerced.
    
    Returns:
        Dict of column name -> normalized value
    """
    if not patch:
        raise ValidationException("patch", "no fields to update")
    
    normalized: Dict[str, Any] = {}
    for key, value in patch.items():
        if key in PROTECTED_FIELDS:
            raise ValidationException(key, "cannot be modified")
        if key not in UPDATABLE_FIELDS:
            raise ValidationException(key, "unknown field")
        
        if key in REQUIRED_FIELDS and _blank(value):
            raise ValidationException(key, "is required")
        
        if key in _ENUM_FIELDS:
            value = coerce_enum(_ENUM_FIELDS[key], key, value)
            if key == "status" and value is None:
                raise ValidationException(key, "is required")
        elif key == "application_date":
            value = _coerce_date(key, value)
        elif key in ("salary_min", "salary_max"):
            value = _coerce_amount(key, value)
        elif key in ("salary_not_specified", "is_priority"):
            value = bool(value)
        elif key in ("company_name", "position_title"):
            value = _required_text(key, value)
        else:
            value = _optional_text(key, value)
        
        normalized[key] = value
    
    return normalized
