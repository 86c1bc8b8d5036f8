"""Log discovery, parsing and task derivation."""

from squadlens.logs.discovery import LogDiscovery, parse_log_filename
from squadlens.logs.parser import parse_all_logs, parse_log, parse_log_file
from squadlens.logs.tasks import DerivationResult, TaskDeriver, TaskLedger, derive_tasks

__all__ = [
    "DerivationResult",
    "LogDiscovery",
    "TaskDeriver",
    "TaskLedger",
    "derive_tasks",
    "parse_all_logs",
    "parse_log",
    "parse_log_file",
    "parse_log_filename",
]
