"""Maintenance-script config: a direct MySQL connection from ``DB_*`` env vars."""

import os
from pathlib import Path

import mysql.connector
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)

DB_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "port": int(os.environ.get("DB_PORT", "3306")),
    "user": os.environ.get("DB_USER", "root"),
    "password": os.environ.get("DB_PASSWORD", "root"),
    "database": os.environ.get("DB_NAME", "hrms_db_new"),
}


def get_mysql_conn():
    """Return a mysql-connector connection to the HRMS database."""
    return mysql.connector.connect(**DB_CONFIG)
