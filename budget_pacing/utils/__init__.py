"""Period math and audit logging."""

from budget_pacing.utils.audit_logger import AuditLogger

__all__ = [
    "AuditLogger",
]
