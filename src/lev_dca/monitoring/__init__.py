"""Monitoring exports."""

from lev_dca.monitoring.audit import AuditLog
from lev_dca.monitoring.monitor import Monitor, report_results
from lev_dca.monitoring.notifier import LogNotifier, MemoryNotifier, Notifier

__all__ = [
    "AuditLog",
    "LogNotifier",
    "MemoryNotifier",
    "Monitor",
    "Notifier",
    "report_results",
]
