"""Audit logging for entity lifecycle operations.

Each add/remove/suspend/resume attempt is recorded as one JSON object per
line. Entries never contain user keys.
"""

import getpass
import json
import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Self

from . import __version__

AUDIT_LOGGER_NAME = "orgadmin_audit"
AUDIT_LOG_DIR = "log"
AUDIT_LOG_FILE = "audit.log"


class AuditEventType(Enum):
    """Types of audit events."""
    LIFECYCLE_OPERATION = "lifecycle_operation"
    INITIALIZATION = "initialization"
    ERROR = "error"


class AuditLogger:
    """Writes structured audit entries through the ``orgadmin_audit`` logger."""

    def __init__(self: Self, logger: Optional[logging.Logger] = None) -> None:
        """Initialize the audit logger.

        Args:
            logger: Logger to write to. Defaults to the shared audit logger,
                which discards entries until ``attach_file`` is called.
        """
        if logger is None:
            logger = logging.getLogger(AUDIT_LOGGER_NAME)
            logger.setLevel(logging.INFO)
            logger.propagate = False
            if not logger.handlers:
                logger.addHandler(logging.NullHandler())
        self.logger = logger

    def attach_file(self: Self, root: Path) -> Path:
        """Send entries to ``<root>/log/audit.log`` (owner-only permissions).

        Existing handlers are closed and replaced.

        Returns:
            The audit log path.
        """
        log_dir = Path(root) / AUDIT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(log_dir, 0o700)

        log_file = log_dir / AUDIT_LOG_FILE
        if not log_file.exists():
            log_file.touch()
        os.chmod(log_file, 0o600)

        self.detach()
        handler = logging.FileHandler(log_file)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(handler)
        return log_file

    def detach(self: Self) -> None:
        """Close all handlers and fall back to discarding entries."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.addHandler(logging.NullHandler())

    def _create_log_entry(
        self: Self,
        event_type: AuditEventType,
        message: str,
        action: Optional[str] = None,
        resource: Optional[str] = None,
        result: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: str = "INFO"
    ) -> Dict[str, Any]:
        """Create a structured log entry.

        Args:
            event_type: Type of audit event
            message: Log message
            action: Action being performed
            resource: Resource being acted on
            result: Result of the action (SUCCESS, FAILED)
            details: Additional details as dictionary
            severity: Log severity level

        Returns:
            Structured log entry as dictionary
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type.value,
            "severity": severity,
            "message": message,
            "source": "orgadmin_cli",
            "version": __version__,
            "user": self.get_user(),
        }

        if action:
            entry["action"] = action
        if resource:
            entry["resource"] = resource
        if result:
            entry["result"] = result
        if details:
            entry["details"] = details

        return entry

    def log_operation(
        self: Self,
        verb: str,
        kind: str,
        target: str,
        success: bool,
        org: Optional[str] = None,
        error_kind: Optional[str] = None
    ) -> None:
        """Log one lifecycle attempt.

        Args:
            verb: add, remove, suspend or resume.
            kind: Entity label (organization, group, user).
            target: Entity name.
            success: Whether the operation was applied.
            org: Parent organization for groups and users.
            error_kind: Error category when the attempt failed.
        """
        status = "SUCCESS" if success else "FAILED"
        resource = f"{org}/{kind}:{target}" if org else f"{kind}:{target}"
        details: Dict[str, Any] = {"kind": kind}
        if org:
            details["org"] = org
        if error_kind:
            details["error_kind"] = error_kind

        entry = self._create_log_entry(
            event_type=AuditEventType.LIFECYCLE_OPERATION,
            message=f"{verb} {kind} {status.lower()}: {target}",
            action=verb,
            resource=resource,
            result=status,
            details=details,
            severity="INFO" if success else "WARNING"
        )
        self._write_entry(entry)

    def log_initialization(self: Self, root: Path) -> None:
        entry = self._create_log_entry(
            event_type=AuditEventType.INITIALIZATION,
            message=f"Initialized data root {root}",
            action="init",
            resource=str(root),
            result="SUCCESS",
        )
        self._write_entry(entry)

    def log_error(self: Self, error_kind: str, error_message: str) -> None:
        """Log a failure that happened before any target was processed."""
        entry = self._create_log_entry(
            event_type=AuditEventType.ERROR,
            message=f"Error: {error_kind} - {error_message}",
            action="error",
            result="ERROR",
            details={"error_kind": error_kind, "error_message": error_message},
            severity="ERROR"
        )
        self._write_entry(entry)

    def _write_entry(self: Self, entry: Dict[str, Any]) -> None:
        level = getattr(logging, entry["severity"], logging.INFO)
        self.logger.log(level, json.dumps(entry, default=str))

    def get_user(self: Self) -> str:
        """Get the operator's login name."""
        user = os.environ.get('USER') or os.environ.get('USERNAME')
        if user:
            return user
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "unknown"


# Global audit logger instance
_audit_logger = None


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger instance."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
