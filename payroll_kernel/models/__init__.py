"""SQLAlchemy ORM models for the payroll core."""

from payroll_kernel.models.approval_audit import ApprovalAuditRecordModel
from payroll_kernel.models.batch import PayrollBatchLineModel, PayrollBatchModel

__all__ = [
    "ApprovalAuditRecordModel",
    "PayrollBatchLineModel",
    "PayrollBatchModel",
]
