"""Plain helpers shared by the payroll tests."""

from decimal import Decimal

from payroll_kernel.domain.batch import BatchSnapshot, EmployeeLine
from payroll_services import BatchLineInput


def line(employee_id, name, gross, deductions="0", is_bonus=False):
    """Shorthand for a BatchLineInput with string amounts."""
    return BatchLineInput(
        employee_id=employee_id,
        employee_name=name,
        gross=Decimal(gross),
        deductions=Decimal(deductions),
        is_bonus=is_bonus,
    )


STANDARD_LINES = (
    line("E001", "Asha Rao", "50000.00", "5000.00"),
    line("E002", "Ben Okafor", "42000.00", "4200.00"),
    line("E003", "Chen Wei", "61000.00", "7300.00"),
)


def snapshot(**employees):
    """
    Build a BatchSnapshot from keyword rows.

    Usage::

        snapshot(E1=("Asha", "100.00", "10.00"), E2=("Ben", "200.00"))
    """
    lines = {}
    for employee_id, row in employees.items():
        name, gross, *rest = row
        deductions = rest[0] if rest else "0"
        lines[employee_id] = EmployeeLine(
            name=name, gross=Decimal(gross), deductions=Decimal(deductions),
        )
    return BatchSnapshot.from_lines(lines)
