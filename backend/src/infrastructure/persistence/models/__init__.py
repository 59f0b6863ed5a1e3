"""ORM Models Package"""

from .application import ApplicationModel
from .timeline import ApplicationTimelineModel

__all__ = [
    "ApplicationModel",
    "ApplicationTimelineModel",
]
