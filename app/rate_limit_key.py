"""Rate limit key: per user when the caller identifies itself, otherwise per IP."""

from flask import request
from flask_limiter.util import get_remote_address


def get_user_id_or_ip():
    user_id = request.headers.get('X-User-Id')
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address()}"
