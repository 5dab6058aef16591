"""
RFC 7807 Problem Details responses.

Every error raised at the HTTP layer is rendered as an
``application/problem+json`` document so API clients can handle them uniformly.
"""

from flask import jsonify, request


def problem_response(status: int, title: str, detail: str = None, **extra):
    """
    Build a problem+json response.

    Args:
        status: HTTP status code
        title: Short, human-readable summary of the problem type
        detail: Explanation specific to this occurrence
        **extra: Additional members to include in the document

    Returns:
        Tuple of (response, status) suitable for returning from a view
    """
    body = {
        'type': 'about:blank',
        'title': title,
        'status': status,
    }
    if detail:
        body['detail'] = detail
    try:
        body['instance'] = request.path
    except RuntimeError:
        # Outside a request context
        pass
    body.update(extra)

    response = jsonify(body)
    response.status_code = status
    response.mimetype = 'application/problem+json'
    return response, status


def bad_request(detail: str = None, **extra):
    return problem_response(400, 'Bad Request', detail, **extra)


def not_found(detail: str = None):
    return problem_response(404, 'Not Found', detail)


def too_many_requests(detail: str = None):
    return problem_response(429, 'Too Many Requests', detail)


def internal_server_error(detail: str = 'An internal error occurred'):
    return problem_response(500, 'Internal Server Error', detail)


def service_unavailable(detail: str = None):
    return problem_response(503, 'Service Unavailable', detail)
