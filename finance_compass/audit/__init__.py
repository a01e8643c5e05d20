"""Audit logging package."""

from finance_compass.audit.logger import AuditLogger, make_audit_id

__all__ = ["AuditLogger", "make_audit_id"]
