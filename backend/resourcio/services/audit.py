import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from resourcio.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    db: Session,
    user_id: Optional[int],
    action: str,
    resource_type: str,
    resource_id: Any = None,
    details: dict | None = None,
    ip_address: str | None = None,
    commit: bool = True,
):
    """Append an audit row. Pass commit=False to ride along with the caller's transaction."""
    entry = AuditLog(
        user_id=user_id if isinstance(user_id, int) else None,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details=dict(details) if isinstance(details, dict) else {},
        ip_address=ip_address,
    )
    db.add(entry)
    if commit:
        db.commit()
    logger.info("audit %s %s/%s by user=%s", action, resource_type, resource_id, user_id)
    return entry
