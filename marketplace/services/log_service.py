import json
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from marketplace.extensions import db
from marketplace.models.user import ApiLog
from marketplace.services.errors import BackendUnavailable

def log_event(event_type, status, details, user_id=None, ip_address=None):
    """Central place for writing ApiLog entries. Never raises."""
    try:
        log_entry = ApiLog(
            event_type=event_type,
            status=status,
            details=json.dumps(details, ensure_ascii=False, default=str),
            user_id=user_id,
            ip_address=ip_address
        )
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as e:
        current_app.logger.error("Could not save log entry %s: %s", event_type, e)
        db.session.rollback()

@contextmanager
def session_management():
    """Commits on success, rolls back on any error. Database failures surface as BackendUnavailable."""
    try:
        yield
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Database error")
        raise BackendUnavailable() from e
    except Exception:
        db.session.rollback()
        raise
