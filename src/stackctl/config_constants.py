#!/usr/bin/env python3
"""
Configuration constants for stackctl.

CRITICAL: This is the SINGLE SOURCE OF TRUTH for filenames, compose project
names and environment variable names. Other modules import from here instead
of hardcoding strings.

Naming Convention:
- .env          = Local key/value overrides (gitignored, optional)
- stackctl.toml = Project configuration (optional, Jinja2 template + TOML)
- backups/      = Backup artifacts, one file per dump
"""

# ============================================================================
# Files and directories (relative to the repository root)
# ============================================================================

LOCAL_ENV_FILE = '.env'
PROJECT_CONFIG_FILE = 'stackctl.toml'
BACKUP_DIR = 'backups'

COMPOSE_FILE_DEV = 'docker/compose.development.yaml'
COMPOSE_FILE_PROD = 'docker/compose.production.yaml'

# ============================================================================
# Modes
# ============================================================================

MODE_DEV = 'dev'
MODE_PROD = 'prod'

PROJECT_NAME_DEV = 'ecommerce_dev'
PROJECT_NAME_PROD = 'ecommerce_prod'

VOLUMES_DEV = ['mongo-data-dev']
VOLUMES_PROD = ['mongo-data-prod']

# ============================================================================
# Engine and services
# ============================================================================

COMPOSE_COMMAND = ['docker', 'compose']

DEFAULT_SHELL_SERVICE = 'backend'
SHELL_COMMAND = ['/bin/sh']

DATABASE_SERVICE = 'mongo'
DATABASE_CLIENT = 'mongosh'
DATABASE_DUMP_TOOL = 'mongodump'
DATABASE_AUTH_DB = 'admin'

# ============================================================================
# Health probes
# ============================================================================

HEALTH_HOST = 'localhost'
GATEWAY_HEALTH_PATH = '/health'
BACKEND_HEALTH_PATH = '/api/health'
HEALTH_TIMEOUT_SECONDS = 5.0

# ============================================================================
# Environment variable names
# ============================================================================

ENV_DB_USERNAME = 'MONGO_INITDB_ROOT_USERNAME'
ENV_DB_PASSWORD = 'MONGO_INITDB_ROOT_PASSWORD'
ENV_GATEWAY_PORT = 'GATEWAY_PORT'
ENV_MODE = 'MODE'
ENV_SERVICE = 'SERVICE'
ENV_ARGS = 'ARGS'
ENV_LOG_LEVEL = 'STACKCTL_LOG_LEVEL'

DEFAULT_LOG_LEVEL = 'INFO'
