"""
Payroll Kernel

Shared foundation for the payroll compliance and reconciliation core:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock for deterministic scheduling and approval timestamps
- Domain value objects for batches, schedules and approvals
- SQLAlchemy persistence for batches and the approval audit trail
"""

__version__ = "0.1.0"
