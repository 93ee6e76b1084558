"""
Scheduling error types
"""
from typing import List


class SchedulingError(Exception):
    """Base class for scheduling failures"""


class InvalidInputError(SchedulingError, ValueError):
    """Search request rejected before any work starts"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class AvailabilityLookupError(SchedulingError):
    """Availability for one candidate could not be established"""
