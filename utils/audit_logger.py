"""
Audit logging for identity operations.

This module provides structured logging for identity events including user
creation, lookups, hash updates, deletions, authentication failures and storage
errors. Logs are formatted as JSON for easy parsing by monitoring tools.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from flask import request, has_request_context
from config import Config


class AuditEventType:
    """Enumeration of audit event types."""
    # Identity events
    USER_CREATE = "user.create"
    USER_RESOLVE = "user.resolve"
    USER_LOOKUP = "user.lookup"
    USER_UPDATE_HASH = "user.update_hash"
    USER_DELETE = "user.delete"

    # Authentication events
    AUTH_FAILURE = "auth.failure"

    # Errors
    ERROR_STORAGE = "error.storage"
    ERROR_APPLICATION = "error.application"


class AuditLogger:
    """
    Centralized audit logger for identity events.

    Logs are structured JSON with consistent fields:
    - timestamp: ISO8601 timestamp
    - event_type: Type of event (see AuditEventType)
    - user_uuid: User identifier if known
    - ip_address, method, path: Request context when inside a request
    - data: Event-specific data
    - status: success/failure
    - message: Human-readable message
    """

    def __init__(self):
        self.logger = logging.getLogger('audit')
        self.logger.setLevel(getattr(logging, Config.LOG_LEVEL, logging.INFO))

        if Config.AUDIT_LOG_FILE:
            handler = logging.FileHandler(Config.AUDIT_LOG_FILE)
        else:
            handler = logging.StreamHandler(sys.stdout)

        if Config.LOG_FORMAT == 'json':
            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )

        handler.setFormatter(formatter)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _get_request_context(self) -> Dict[str, Any]:
        """Extract request context information."""
        context = {}

        if has_request_context():
            context['ip_address'] = request.remote_addr
            context['method'] = request.method
            context['path'] = request.path

        return context

    def log_event(
        self,
        event_type: str,
        status: str = 'success',
        user_uuid: Optional[str] = None,
        message: Optional[str] = None,
        **data
    ):
        """
        Log an audit event.

        Args:
            event_type: Type of event (use AuditEventType constants)
            status: 'success' or 'failure'
            user_uuid: User identifier if applicable
            message: Human-readable message
            **data: Additional event-specific data
        """
        event = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
            'status': status,
        }

        event.update(self._get_request_context())

        if user_uuid:
            event['user_uuid'] = user_uuid
        if message:
            event['message'] = message
        if data:
            event['data'] = data

        rendered = json.dumps(event) if Config.LOG_FORMAT == 'json' else str(event)
        if status == 'failure' or event_type.startswith('error.'):
            self.logger.warning(rendered)
        else:
            self.logger.info(rendered)

    # Convenience methods for common events

    def log_user_created(self, user_uuid: str, app_hash: str):
        """Log creation of a new identity."""
        self.log_event(
            AuditEventType.USER_CREATE,
            user_uuid=user_uuid,
            message=f'New user created: {user_uuid}',
            hash=app_hash
        )

    def log_user_resolved(self, user_uuid: str, app_hash: str):
        """Log resolution of a create request to an existing identity."""
        self.log_event(
            AuditEventType.USER_RESOLVE,
            user_uuid=user_uuid,
            message=f'Existing user resolved: {user_uuid}',
            hash=app_hash
        )

    def log_auth_failure(self, reason: str, user_uuid: Optional[str] = None):
        """Log a rejected signature or malformed credential."""
        self.log_event(
            AuditEventType.AUTH_FAILURE,
            status='failure',
            user_uuid=user_uuid,
            message=f'Authentication failed: {reason}',
            reason=reason
        )

    def log_error(self, event_type: str, message: str, **details):
        """Log error event (use the AuditEventType.ERROR_* constants)."""
        self.log_event(
            event_type,
            status='failure',
            message=message,
            **details
        )


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
        }

        # If the message is already JSON (from audit logger), parse it
        try:
            message_data = json.loads(record.getMessage())
        except (json.JSONDecodeError, ValueError):
            message_data = None
        if isinstance(message_data, dict):
            log_data.update(message_data)
        else:
            log_data['message'] = record.getMessage()

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


# Global audit logger instance
audit_logger = AuditLogger()
