"""Domain Entities - Core business objects"""

from .application import Application, NewApplication, normalize_patch
from .timeline import TimelineEntry
__all__ = ["Application", "NewApplication", "TimelineEntry", "normalize_patch"]
