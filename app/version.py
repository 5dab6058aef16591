"""Version information for the Automation service."""

VERSION = '1.0.0'
SERVICE_NAME = 'automation'
