"""
Structured Logging

JSON log lines with a per-request correlation ID, so a single rule request
can be followed across the gateway, this service and the rule store.
"""

import json
import logging
import uuid
from datetime import datetime, timezone

from flask import g, has_request_context, request

CORRELATION_HEADER = 'X-Correlation-ID'


def get_correlation_id():
    """Return the correlation ID for the current request, or None outside one."""
    if has_request_context():
        return getattr(g, 'correlation_id', None)
    return None


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation ID to every record."""

    def filter(self, record):
        record.correlation_id = get_correlation_id()
        return True


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def __init__(self, service_name):
        super().__init__()
        self.service_name = service_name

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'service': self.service_name,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', None),
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_structured_logging(app, logger, enable_json=True):
    """
    Switch a logger to JSON output and register correlation ID handling.

    Args:
        app: Flask application
        logger: Logger whose handlers should emit JSON
        enable_json: When False only the correlation ID handling is installed
    """
    correlation_filter = CorrelationIdFilter()
    for handler in logger.handlers:
        handler.addFilter(correlation_filter)
        if enable_json:
            handler.setFormatter(JSONFormatter(app.config.get('SERVICE_NAME', 'automation')))

    @app.before_request
    def assign_correlation_id():
        g.correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

    @app.after_request
    def return_correlation_id(response):
        correlation_id = getattr(g, 'correlation_id', None)
        if correlation_id:
            response.headers[CORRELATION_HEADER] = correlation_id
        return response
