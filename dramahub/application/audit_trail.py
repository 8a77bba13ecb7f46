"""General action log.

The `audit_log` table is kept for future use; no request flow writes to it.
"""

from sqlmodel import Session

from ..domain.entities import AuditEvent, utcnow
from ..infrastructure.database.repositories import AuditLogRepository


class AuditTrail:
    def __init__(self, session: Session):
        self.repo = AuditLogRepository(session)

    def append(
        self,
        actor_id: int | None,
        action: str,
        target_type: str | None = None,
        target_id: str | int | None = None,
        payload: str | None = None,
    ) -> AuditEvent:
        return self.repo.add(
            AuditEvent(
                id=None,
                actor_id=actor_id,
                action=action,
                target_type=target_type,
                target_id=str(target_id) if target_id is not None else None,
                payload=payload,
                created_at=utcnow(),
            )
        )

    def recent(self, limit: int = 50) -> list[AuditEvent]:
        return self.repo.find_recent(limit)
