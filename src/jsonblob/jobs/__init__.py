from .scheduler import PeriodicScheduler, ScheduledTask

__all__ = ["PeriodicScheduler", "ScheduledTask"]
