# backend/courtside/routes/system.py
"""
System health endpoint.

Reports database connectivity, session table state and live notification
subscribers for deployment debugging.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db, notification_hub
from ..models import Court, SessionToken, Table, User
from ..models.auth import ROLE_OWNER
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Run a few cheap counts against core tables."""
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        owner_count = db.session.query(User).filter_by(role=ROLE_OWNER, is_active=True).count()
        table_count = db.session.query(Table).count()
        court_count = db.session.query(Court).count()

        elapsed_ms = (time.time() - start_time) * 1000
        status = "healthy" if owner_count > 0 else "degraded"

        result = {
            "status": status,
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "owners": owner_count,
                "tables": table_count,
                "courts": court_count,
            }
        }
        if status == "degraded":
            result["warning"] = "No active OWNER account; run `flask system init`"
        return result
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_session_service_health() -> dict:
    start_time = time.time()
    try:
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
        expired_sessions = db.session.query(SessionToken).filter(
            SessionToken.expires_at < utcnow(),
            SessionToken.is_revoked.is_(False),
        ).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "active_sessions": active_sessions,
                "expired_pending_cleanup": expired_sessions,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Session service health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Session service error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded (still operational)
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    session_health = check_session_service_health()

    all_checks = [database_health, session_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status, http_status = "unhealthy", 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "session_service": session_health,
            "notification_stream": {
                "status": "healthy",
                "subscribers": notification_hub.subscriber_count,
            },
        }
    }

    return response, http_status
