"""
Derived Statistics
Pure aggregates over an in-memory list of applications (no I/O)
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from domain.entities import Application
from domain.enums import ApplicationStatus, LocationType, Platform, get_status_label


@dataclass(frozen=True)
class ApplicationStats:
    """Dashboard counters"""
    total: int
    pending: int
    in_review: int
    interviews: int
    accepted: int
    rejected: int
    response_rate: float  # percentage, 0 when there are no applications
    this_month: int
    last_month: int
    by_status: Dict[ApplicationStatus, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PlatformStat:
    """How well a platform converts into interviews"""
    platform: Platform
    count: int
    interviews: int
    effectiveness: float  # percentage


@dataclass(frozen=True)
class StatusSlice:
    """One slice of the status distribution chart"""
    status: ApplicationStatus
    label: str
    count: int


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def _previous_month(today: date) -> tuple:
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


def compute_stats(applications: Sequence[Application], today: Optional[date] = None) -> ApplicationStats:
    """
    Compute dashboard counters.
    
    Args:
        applications: Current in-memory list
        today: Reference day for the month counters (defaults to today)
    """
    today = today or date.today()
    last_year, last_month = _previous_month(today)
    
    by_status = Counter(app.status for app in applications)
    this_month_count = sum(
        1 for app in applications
        if app.application_date.year == today.year and app.application_date.month == today.month
    )
    last_month_count = sum(
        1 for app in applications
        if app.application_date.year == last_year and app.application_date.month == last_month
    )
    
    total = len(applications)
    responded = sum(1 for app in applications if app.has_response())
    
    return ApplicationStats(
        total=total,
        pending=by_status[ApplicationStatus.PENDIENTE],
        in_review=by_status[ApplicationStatus.EN_REVISION],
        interviews=by_status[ApplicationStatus.ENTREVISTA_PROGRAMADA],
        accepted=by_status[ApplicationStatus.ACEPTADA],
        rejected=by_status[ApplicationStatus.RECHAZADA],
        response_rate=_percentage(responded, total),
        this_month=this_month_count,
        last_month=last_month_count,
        by_status={status: by_status[status] for status in ApplicationStatus},
    )


def company_names(applications: Iterable[Application]) -> List[str]:
    """Distinct company names, sorted (case-sensitive)"""
    return sorted({app.company_name for app in applications})


def by_status(applications: Iterable[Application], status: ApplicationStatus) -> List[Application]:
    return [app for app in applications if app.status == status]


def platform_stats(applications: Iterable[Application]) -> List[PlatformStat]:
    """Per observed platform: count, interviews and effectiveness, biggest first"""
    counts: Counter = Counter()
    interviews: Counter = Counter()
    
    for app in applications:
        counts[app.platform] += 1
        if app.has_interview():
            interviews[app.platform] += 1
    
    stats = [
        PlatformStat(
            platform=platform,
            count=count,
            interviews=interviews[platform],
            effectiveness=_percentage(interviews[platform], count),
        )
        for platform, count in counts.items()
    ]
    # sorted() is stable, equal counts keep first-seen order
    return sorted(stats, key=lambda s: s.count, reverse=True)


def monthly_counts(applications: Iterable[Application], year: int) -> List[int]:
    """Applications per calendar month of year (12 buckets, January first)"""
    buckets = [0] * 12
    for app in applications:
        if app.application_date.year == year:
            buckets[app.application_date.month - 1] += 1
    return buckets


def status_distribution(applications: Iterable[Application]) -> List[StatusSlice]:
    """Non-empty statuses in declaration order"""
    counts = Counter(app.status for app in applications)
    return [
        StatusSlice(status=status, label=get_status_label(status), count=counts[status])
        for status in ApplicationStatus
        if counts[status] > 0
    ]


def filter_applications(
    applications: Iterable[Application],
    search: Optional[str] = None,
    status: Optional[ApplicationStatus] = None,
    platform: Optional[Platform] = None,
    location_type: Optional[LocationType] = None
) -> List[Application]:
    """
    Table filters. None means "all"; search matches company or position
    case-insensitively.
    """
    query = search.strip() if search else ""
    result = []
    for app in applications:
        if query and not app.matches_search(query):
            continue
        if status is not None and app.status != status:
            continue
        if platform is not None and app.platform != platform:
            continue
        if location_type is not None and app.location_type != location_type:
            continue
        result.append(app)
    return result
