"""
Service Client

Helper for calling other services that sit behind the gateway.
Service base URLs are read from services.json (loaded into app.config['SERVICES']).
"""

import os

import requests
from flask import current_app, has_app_context

DEFAULT_TIMEOUT = 10


def _service_config():
    if has_app_context():
        return current_app.config.get('SERVICES', {}), current_app.config.get('SERVICE_TIMEOUT', DEFAULT_TIMEOUT)
    return {}, DEFAULT_TIMEOUT


def get_service_url(service_name: str) -> str:
    """
    Resolve the base URL of a service.

    Looks in services.json first, then in the <SERVICE>_SERVICE_URL
    environment variable.

    Raises:
        ValueError: If the service is not configured anywhere
    """
    services, _ = _service_config()
    service = services.get(service_name) or {}
    url = service.get('url') or os.environ.get(f"{service_name.upper()}_SERVICE_URL")
    if not url:
        raise ValueError(f"Service '{service_name}' is not configured")
    return url.rstrip('/')


def call_service(service_name: str, path: str, method: str = 'GET', **kwargs) -> requests.Response:
    """
    Make a request to another service.

    Args:
        service_name: Key of the service in services.json (e.g., 'rulestore')
        path: Path on that service (e.g., '/api/rules')
        method: HTTP method
        **kwargs: Passed through to requests (json, params, headers, ...)

    Returns:
        requests.Response

    Raises:
        ValueError: If the service is unknown
        requests.RequestException: On transport errors
    """
    _, timeout = _service_config()
    url = f"{get_service_url(service_name)}{path}"

    headers = kwargs.pop('headers', {}) or {}
    if has_app_context():
        headers.setdefault('X-Calling-Service', current_app.config.get('SERVICE_NAME', 'automation'))
    kwargs.setdefault('timeout', timeout)

    return requests.request(method, url, headers=headers, **kwargs)
