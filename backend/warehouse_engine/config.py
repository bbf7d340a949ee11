# backend/warehouse_engine/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/warehouse_engine.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///warehouse_engine.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound for a single engine transaction waiting on a lock.
    TRANSACTION_TIMEOUT_SECONDS = int(os.environ.get("TRANSACTION_TIMEOUT_SECONDS", "30"))

    # XP awarded per unit shipped by the daily fulfillment run (0 disables the reward)
    FULFILLMENT_XP_PER_UNIT = int(os.environ.get("FULFILLMENT_XP_PER_UNIT", "1"))

    # Part-time staff (manual backlog clearing)
    PART_TIME_UNITS_PER_WORKER = int(os.environ.get("PART_TIME_UNITS_PER_WORKER", "20"))
    PART_TIME_COST_PER_WORKER_CENTS = int(os.environ.get("PART_TIME_COST_PER_WORKER_CENTS", "6000"))
    PART_TIME_STAFF_MAX = int(os.environ.get("PART_TIME_STAFF_MAX", "200"))

    # Returns notification: number of products itemized before the "+N more" trailer
    RETURNS_NOTIFICATION_TOP_N = int(os.environ.get("RETURNS_NOTIFICATION_TOP_N", "8"))
