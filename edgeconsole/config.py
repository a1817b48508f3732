"""Centralized configuration for edgeconsole."""
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Base configuration loaded from environment variables."""
    SECRET_KEY = os.getenv('SECRET_KEY')
    DATABASE_PATH = os.getenv('DATABASE_PATH', '/data/edgeconsole.db')
    BLOB_STORE_PATH = os.getenv('BLOB_STORE_PATH', '/data/blobs')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    RATE_LIMIT_PER_MINUTE = int(os.getenv('RATE_LIMIT_PER_MINUTE', '120'))
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'true')
    RATELIMIT_STORAGE_URI = 'memory://'
    FORCE_HTTPS = _env_flag('FORCE_HTTPS')
    PORT = int(os.getenv('PORT', '5000'))

    # Identity provider trust domain. Leaving either empty disables the access gate.
    TEAM_DOMAIN = os.getenv('TEAM_DOMAIN', '')
    POLICY_AUD = os.getenv('POLICY_AUD', '')
    ACCESS_COOKIE_NAME = os.getenv('ACCESS_COOKIE_NAME', 'CF_Authorization')
    ACCESS_HEADER_NAME = os.getenv('ACCESS_HEADER_NAME', 'Cf-Access-Jwt-Assertion')
    ACCESS_KEYS_TTL_SECONDS = int(os.getenv('ACCESS_KEYS_TTL_SECONDS', '300'))

    SCHEDULER_ENABLED = _env_flag('SCHEDULER_ENABLED', 'true')
    SCHEDULE_SCAN_INTERVAL_SECONDS = int(os.getenv('SCHEDULE_SCAN_INTERVAL_SECONDS', '60'))


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
