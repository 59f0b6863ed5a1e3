"""
Applications API Endpoints
Tracking of the connected wallet's job applications
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from presentation.api.v1.schemas.applications import (
    ApplicationCreateRequest,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdateRequest,
    MonthlyCountsResponse,
    PlatformStatResponse,
    StatsResponse,
    StatusSliceResponse,
    StatusUpdateRequest,
    TimelineEntryResponse
)
from presentation.api.v1.dependencies import get_applications_state
from application.services.application_tracking import ApplicationsState
from domain.enums import ApplicationStatus, LocationType, Platform, get_platform_label


router = APIRouter()


def _list_response(state: ApplicationsState, items) -> ApplicationListResponse:
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(app) for app in items],
        total=len(items),
        state=state.state.value,
        error=state.error
    )


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    search: Optional[str] = Query(None, description="Matches company or position"),
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    platform: Optional[Platform] = Query(None),
    location_type: Optional[LocationType] = Query(None),
    state: ApplicationsState = Depends(get_applications_state)
):
    """
    List the wallet's applications, newest first.
    
    The list is the cached one: if the last load failed it is the last good
    list and `error` carries the message.
    """
    items = state.filter(
        search=search,
        status=status_filter,
        platform=platform,
        location_type=location_type
    )
    return _list_response(state, items)


@router.post("/applications", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    request: ApplicationCreateRequest,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Create a new application"""
    created = await state.create(request.to_fields())
    logger.info(f"Application {created.id} created for wallet {state.owner_id}")
    return ApplicationResponse.model_validate(created)


@router.post("/applications/refresh", response_model=ApplicationListResponse)
async def refresh_applications(state: ApplicationsState = Depends(get_applications_state)):
    """Reload the wallet's list from the database"""
    await state.refresh()
    return _list_response(state, state.applications)


@router.get("/applications/stats", response_model=StatsResponse)
async def get_stats(state: ApplicationsState = Depends(get_applications_state)):
    """Dashboard counters"""
    return StatsResponse.model_validate(state.get_stats())


@router.get("/applications/companies", response_model=List[str])
async def get_company_names(state: ApplicationsState = Depends(get_applications_state)):
    """Distinct company names, sorted (autocomplete)"""
    return state.get_company_names()


@router.get("/applications/platform-stats", response_model=List[PlatformStatResponse])
async def get_platform_stats(state: ApplicationsState = Depends(get_applications_state)):
    """Per-platform counts and interview effectiveness"""
    return [
        PlatformStatResponse(
            platform=item.platform,
            label=get_platform_label(item.platform),
            count=item.count,
            interviews=item.interviews,
            effectiveness=item.effectiveness
        )
        for item in state.get_platform_stats()
    ]


@router.get("/applications/monthly", response_model=MonthlyCountsResponse)
async def get_monthly_counts(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    state: ApplicationsState = Depends(get_applications_state)
):
    """Applications per month of a year (defaults to current year)"""
    year = year or date.today().year
    return MonthlyCountsResponse(year=year, counts=state.get_monthly_counts(year))


@router.get("/applications/status-distribution", response_model=List[StatusSliceResponse])
async def get_status_distribution(state: ApplicationsState = Depends(get_applications_state)):
    """Non-empty statuses with their labels"""
    return [StatusSliceResponse.model_validate(s) for s in state.get_status_distribution()]


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Single cached application"""
    app = state.get(application_id)
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )
    return ApplicationResponse.model_validate(app)


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: UUID,
    request: ApplicationUpdateRequest,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Update the fields sent in the body"""
    updated = await state.update(application_id, request.to_patch())
    return ApplicationResponse.model_validate(updated)


@router.patch("/applications/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: UUID,
    request: StatusUpdateRequest,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Quick status change; a note adds a timeline entry"""
    updated = await state.update_status(application_id, request.status, note=request.note)
    return ApplicationResponse.model_validate(updated)


@router.delete("/applications/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: UUID,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Delete an application and its timeline"""
    await state.remove(application_id)
    logger.info(f"Application {application_id} deleted for wallet {state.owner_id}")


@router.get("/applications/{application_id}/timeline", response_model=List[TimelineEntryResponse])
async def get_application_timeline(
    application_id: UUID,
    state: ApplicationsState = Depends(get_applications_state)
):
    """Status history, newest first"""
    entries = await state.get_timeline(application_id)
    return [TimelineEntryResponse.model_validate(e) for e in entries]
