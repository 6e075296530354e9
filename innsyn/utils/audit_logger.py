"""
Audit logging for disclosure request operations.

Every state-changing action on a request (creation, dispatch, outcome
annotation) is written as one JSON line with full user attribution.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from innsyn.utils.logger import get_logger, sanitize_log_data


class AuditLogger:
    """
    Handles audit logging for disclosure requests.

    Logs creation, dispatch and outcome changes with the acting user and
    session so the request history can be reconstructed from the log.
    """

    def __init__(self, component: str):
        """
        Initialize audit logger for a component.

        Args:
            component: Component name for log context
        """
        self.component = component
        self.logger = get_logger(f"audit.{component}")

    def log_request_created(
        self,
        request_id: str,
        user_id: str,
        request_type: str,
        source: str,
        source_entry_id: Any,
        authority: Optional[str] = None,
        recipient_resolved: bool = False,
    ):
        """
        Log creation of a draft request.

        Args:
            request_id: Created request ID
            user_id: Owning user
            request_type: Request type tag
            source: Source table tag
            source_entry_id: Source entry identifier
            authority: Authority the request is addressed to
            recipient_resolved: Whether the recipient email was pre-filled
        """
        self._log_event(
            event_type="REQUEST_CREATED",
            request_id=request_id,
            user_id=user_id,
            details={
                "type": request_type,
                "source": source,
                "source_entry_id": source_entry_id,
                "authority": authority,
                "recipient_resolved": recipient_resolved,
            },
        )

    def log_request_dispatched(self, request_id: str, user_id: str, status: Optional[str] = None):
        """Log a successful dispatch."""
        self._log_event(
            event_type="REQUEST_DISPATCHED",
            request_id=request_id,
            user_id=user_id,
            details={"status_after_reload": status},
        )

    def log_dispatch_failed(self, request_id: str, user_id: str, error_message: str):
        """Log a rejected or failed dispatch."""
        self._log_event(
            event_type="REQUEST_DISPATCH_FAILED",
            severity="WARNING",
            request_id=request_id,
            user_id=user_id,
            details={"error_message": error_message},
        )

    def log_outcome_updated(
        self,
        request_id: str,
        user_id: str,
        outcome_before: Optional[str],
        outcome_after: str,
        status: Optional[str] = None,
    ):
        """
        Log outcome annotation.

        Args:
            request_id: Request being annotated
            user_id: User annotating
            outcome_before: Previous outcome value
            outcome_after: New outcome value
            status: Request status at the time of annotation
        """
        self._log_event(
            event_type="OUTCOME_UPDATED",
            request_id=request_id,
            user_id=user_id,
            details={
                "outcome_before": outcome_before,
                "outcome_after": outcome_after,
                "status": status,
            },
        )

    def log_access_denied(
        self,
        user_id: Optional[str],
        reason: str,
        resource_id: Optional[str] = None,
    ):
        """Log access denied events."""
        self._log_event(
            event_type="ACCESS_DENIED",
            severity="WARNING",
            user_id=user_id,
            resource_id=resource_id,
            details={"reason": reason},
        )

    def log_error(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        """
        Log error events.

        Args:
            operation: Operation that failed
            error_message: Error message
            user_id: User if applicable
            request_id: Request ID if applicable
        """
        self._log_event(
            event_type="ERROR",
            severity="ERROR",
            operation=operation,
            user_id=user_id,
            request_id=request_id,
            details={"error_message": error_message},
        )

    def _log_event(self, event_type: str, severity: str = "INFO", **kwargs):
        """
        Internal method to log events.

        Args:
            event_type: Type of event
            severity: Log severity
            **kwargs: Event data
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": self.component,
            "event_type": event_type,
            "severity": severity,
            **kwargs,
        }

        # Convert UUIDs to strings for JSON serialization
        for key, value in log_entry.items():
            if isinstance(value, UUID):
                log_entry[key] = str(value)
            elif isinstance(value, dict):
                for k, v in value.items():
                    if isinstance(v, UUID):
                        value[k] = str(v)

        log_message = json.dumps(sanitize_log_data(log_entry), default=str)

        if severity == "ERROR":
            self.logger.error(log_message)
        elif severity == "WARNING":
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)


# Global audit logger instances
request_audit_logger = AuditLogger("innsyn_requests")
security_audit_logger = AuditLogger("security")
