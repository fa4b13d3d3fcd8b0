from sqlalchemy.orm import Session
from app.models.audit_log import AuditLog

def audit(db: Session, actor_user_id: int | None, entity_type: str, entity_id, action: str, data: dict | None = None) -> AuditLog:
    row = AuditLog(
        actor_user_id=actor_user_id,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        data=dict(data or {}),
    )
    db.add(row)
    return row
