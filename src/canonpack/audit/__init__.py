"""Audit logging for canonpack builds.

Main Components
---------------
- AuditLogger: JSONL event logger
- LogEvent: one structured event
"""

from canonpack.audit.helpers import generate_run_id, get_canon_version, get_package_version
from canonpack.audit.logger import AuditLogger
from canonpack.audit.models import LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "generate_run_id",
    "get_canon_version",
    "get_package_version",
]
