from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from app.models.models import AuditLog


async def log_audit(
    db: AsyncSession,
    actor_id: Optional[int],
    action: str,
    object_type: str = None,
    object_id=None,
    detail: dict = None,
) -> AuditLog:
    audit = AuditLog(
        actor_id=actor_id,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail,
    )
    db.add(audit)
    # do not commit here; the caller's transaction owns the write
    return audit
