from __future__ import annotations

import logging
from typing import Any, Optional

_audit = logging.getLogger("class_attendance.audit")


def audit(
    action: str,
    *,
    entity: str,
    entity_id: Any,
    actor_id: Optional[int] = None,
    actor_role: Optional[str] = None,
    **metadata: Any,
) -> None:
    """Record a state-changing action on the audit logger."""
    details = " ".join(f"{k}={v}" for k, v in sorted(metadata.items()) if v is not None)
    _audit.info(
        "%s entity=%s id=%s actor=%s role=%s %s",
        action,
        entity,
        entity_id,
        actor_id if actor_id is not None else "-",
        actor_role or "-",
        details,
    )
