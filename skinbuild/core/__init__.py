"""
skinbuild.core - logging, timing, glob and live reload utilities.
"""

from skinbuild.core.utils import Logger, log, plural, uniq
from skinbuild.core.timing import TimingContext, format_duration, timing_summary

__all__ = [
    # Logging
    "Logger",
    "log",
    # Helpers
    "plural",
    "uniq",
    # Timing
    "TimingContext",
    "format_duration",
    "timing_summary",
]
