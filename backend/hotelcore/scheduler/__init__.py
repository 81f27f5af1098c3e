"""
Scheduler interface: framework-agnostic periodic task abstraction
"""
from hotelcore.scheduler.base import ISchedulerBackend

__all__ = ["ISchedulerBackend"]
