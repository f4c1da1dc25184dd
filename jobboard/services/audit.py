from datetime import datetime
from typing import Optional


async def log_admin_action(
    db,
    admin: dict,
    action: str,
    target_type: str,
    target_id: Optional[str] = None,
    details: Optional[dict] = None,
):
    """Record an admin action in the audit_logs collection."""
    audit_entry = {
        "action": action,
        "admin_id": str(admin["_id"]),
        "admin_name": admin.get("name", ""),
        "target_type": target_type,
        "target_id": target_id,
        "details": details or {},
        "timestamp": datetime.utcnow(),
    }
    await db.audit_logs.insert_one(audit_entry)
