from .common import Outcome, OutputModality
from .review import IntegrityReport, QueueSummary, ReviewOutcome, SchedulingState

__all__ = [
    "IntegrityReport",
    "Outcome",
    "OutputModality",
    "QueueSummary",
    "ReviewOutcome",
    "SchedulingState",
]
