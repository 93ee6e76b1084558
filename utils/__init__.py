"""
Utility modules for the Meeting Scheduling Assistant
"""

from .logger import SchedulingLogger
from .validators import RequestValidator, DataSanitizer
from .meeting_logger import MeetingLogger

__all__ = ['SchedulingLogger', 'RequestValidator', 'DataSanitizer', 'MeetingLogger']
