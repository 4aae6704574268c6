# backend/brewhouse/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/brewhouse.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///brewhouse.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Retries for transient storage errors on the order placement write.
    # Optimistic lock conflicts are never retried.
    ORDER_WRITE_RETRY_ATTEMPTS = int(os.environ.get("ORDER_WRITE_RETRY_ATTEMPTS", "3"))
    ORDER_WRITE_RETRY_BACKOFF = float(os.environ.get("ORDER_WRITE_RETRY_BACKOFF", "0.1"))
