"""GPS activity processing package."""

from .errors import ActivityProcessingError, ErrorKind
from .models import ActivityStats, ProcessedActivityData, ProcessingOptions, TrackPoint
from .pipeline import preview_activity, process_activity_file, process_points

__all__ = [
    "ActivityProcessingError",
    "ActivityStats",
    "ErrorKind",
    "ProcessedActivityData",
    "ProcessingOptions",
    "TrackPoint",
    "preview_activity",
    "process_activity_file",
    "process_points",
]
