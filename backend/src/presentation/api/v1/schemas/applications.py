"""
Application Schemas
Pydantic schemas for the applications API
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.enums import (
    ApplicationStatus,
    LocationType,
    Platform,
    SalaryCurrency,
    SalaryPeriod,
)


class ApplicationCreateRequest(BaseModel):
    """New application form"""
    
    company_name: str = Field(..., description="Company name", examples=["Acme"])
    position_title: str = Field(..., description="Position title", examples=["Backend Developer"])
    platform: Platform = Field(..., description="Where the application was submitted")
    platform_other: Optional[str] = Field(None, description="Free text when platform is 'otro'")
    application_date: Optional[date] = Field(None, description="Defaults to today")
    status: ApplicationStatus = ApplicationStatus.PENDIENTE
    
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: Optional[SalaryCurrency] = None
    salary_period: Optional[SalaryPeriod] = None
    salary_not_specified: bool = False
    
    location_type: Optional[LocationType] = None
    location_city: Optional[str] = Field(None, description="Only kept for 'presencial'")
    
    job_url: Optional[str] = None
    personal_notes: Optional[str] = None
    is_priority: bool = False
    
    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()


class ApplicationUpdateRequest(BaseModel):
    """Edit form - only the fields sent are changed"""
    
    company_name: Optional[str] = None
    position_title: Optional[str] = None
    platform: Optional[Platform] = None
    platform_other: Optional[str] = None
    application_date: Optional[date] = None
    status: Optional[ApplicationStatus] = None
    
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: Optional[SalaryCurrency] = None
    salary_period: Optional[SalaryPeriod] = None
    salary_not_specified: Optional[bool] = None
    
    location_type: Optional[LocationType] = None
    location_city: Optional[str] = None
    
    job_url: Optional[str] = None
    personal_notes: Optional[str] = None
    is_priority: Optional[bool] = None
    
    def to_patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StatusUpdateRequest(BaseModel):
    """Quick status change with an optional timeline note"""
    
    status: ApplicationStatus
    note: Optional[str] = Field(None, description="Stored in the timeline when given")


class ApplicationResponse(BaseModel):
    """Single application"""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: UUID
    wallet_address: str
    company_name: str
    position_title: str
    platform: Platform
    platform_label: str
    platform_other: Optional[str] = None
    application_date: date
    status: ApplicationStatus
    status_label: str
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
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ApplicationListResponse(BaseModel):
    """Cached list plus the container state"""
    
    items: List[ApplicationResponse]
    total: int
    state: str
    error: Optional[str] = None


class TimelineEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: UUID
    application_id: UUID
    old_status: Optional[ApplicationStatus] = None
    new_status: ApplicationStatus
    notes: Optional[str] = None
    changed_at: Optional[datetime] = None


class StatsResponse(BaseModel):
    """Dashboard counters"""
    
    model_config = ConfigDict(from_attributes=True)
    
    total: int
    pending: int
    in_review: int
    interviews: int
    accepted: int
    rejected: int
    response_rate: float
    this_month: int
    last_month: int
    by_status: Dict[ApplicationStatus, int]


class PlatformStatResponse(BaseModel):
    platform: Platform
    label: str
    count: int
    interviews: int
    effectiveness: float


class MonthlyCountsResponse(BaseModel):
    year: int
    counts: List[int]


class StatusSliceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    status: ApplicationStatus
    label: str
    count: int
