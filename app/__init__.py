from flask import Flask
import json
import os
import configparser

app = Flask(__name__, instance_relative_config=True)

# Rule descriptions are short; keep request bodies small
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024

# --- Explicitly load all required configuration from environment variables ---
app.config['SERVICE_NAME'] = os.environ.get('SERVICE_NAME', 'automation')
app.config['SERVICE_TIMEOUT'] = float(os.environ.get('SERVICE_TIMEOUT', '10'))

# Initialize the service logger
from app.service_logger import init_service_logger
service_logger = init_service_logger(app.config['SERVICE_NAME'], os.environ.get('LOG_LEVEL', 'INFO'))

# Enable structured JSON logging with correlation IDs
# Set ENABLE_JSON_LOGGING=false in environment to disable for development
enable_json = os.environ.get("ENABLE_JSON_LOGGING", "true").lower() in ("true", "1", "yes")
from app.structured_logger import setup_structured_logging
setup_structured_logging(app, service_logger, enable_json=enable_json)

# Optional instance config; environment variables take precedence
try:
    os.makedirs(app.instance_path)
except OSError:
    pass

config_path = os.path.join(app.instance_path, 'automation.conf')
config = configparser.RawConfigParser()
config.read(config_path)

app.config['RULE_STORE_BACKEND'] = os.environ.get(
    'RULE_STORE_BACKEND', config.get('rule_store', 'backend', fallback='memory'))
app.config['RULE_STORE_SERVICE'] = os.environ.get(
    'RULE_STORE_SERVICE', config.get('rule_store', 'service', fallback='rulestore'))

# Load services configuration from services.json (for service-to-service calls)
try:
    with open('services.json') as f:
        app.config['SERVICES'] = json.load(f)
except FileNotFoundError:
    service_logger.warning("services.json not found. Service-to-service calls will not work.")
    app.config['SERVICES'] = {}

# Initialize the rule store
from app.rule_store import init_rule_store
init_rule_store(app)

# Initialize rate limiter
from flask_limiter import Limiter
from app.rate_limit_key import get_user_id_or_ip

limiter = Limiter(
    app=app,
    key_func=get_user_id_or_ip,  # Per-user rate limiting
    default_limits=["10000 per hour", "500 per minute"],
    storage_uri="memory://"
)

# Apply ProxyFix to handle X-Forwarded headers from the gateway
from werkzeug.middleware.proxy_fix import ProxyFix
app.wsgi_app = ProxyFix(
    app.wsgi_app,
    x_for=1,      # Trust X-Forwarded-For
    x_proto=1,    # Trust X-Forwarded-Proto
    x_host=1,     # Trust X-Forwarded-Host
    x_prefix=1    # Trust X-Forwarded-Prefix
)

# Register RFC 7807 error handlers for consistent API error responses
from werkzeug.exceptions import HTTPException
from app.error_responses import (
    problem_response,
    internal_server_error,
    not_found,
    bad_request,
    too_many_requests,
    service_unavailable
)

@app.errorhandler(400)
def handle_bad_request(e):
    """Handle 400 Bad Request errors"""
    return bad_request(detail=e.description)

@app.errorhandler(404)
def handle_not_found(e):
    """Handle 404 Not Found errors"""
    return not_found(detail=e.description)

@app.errorhandler(429)
def handle_rate_limited(e):
    """Handle 429 Too Many Requests errors"""
    return too_many_requests(detail=e.description)

@app.errorhandler(500)
def handle_internal_error(e):
    """Handle 500 Internal Server Error"""
    service_logger.error(f"Internal server error: {e}")
    return internal_server_error()

@app.errorhandler(503)
def handle_service_unavailable(e):
    """Handle 503 Service Unavailable errors"""
    return service_unavailable(detail=e.description)

@app.errorhandler(Exception)
def handle_unexpected_error(e):
    """Catch-all handler for unexpected exceptions"""
    if isinstance(e, HTTPException):
        return problem_response(e.code, e.name, e.description)
    service_logger.exception(f"Unexpected error: {e}")
    return internal_server_error(detail="An unexpected error occurred")

from app import routes

service_logger.info(f"{app.config['SERVICE_NAME']} service started")
