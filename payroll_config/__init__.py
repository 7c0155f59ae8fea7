"""
payroll_config -- single public entrypoint for payroll rule tables.

Responsibility:
    Provides the ONLY way to obtain rule tables at runtime through
    ``get_active_rules()``.  No engine or service reads YAML files or
    environment variables directly.  Returns a frozen ``RuleSet``.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and below
    ``payroll_services`` / ``payroll_api``.  The kernel and the engines
    MUST NEVER import from ``payroll_config``.

Invariants enforced:
    - Single entrypoint: all runtime rules flow through ``get_active_rules()``.
    - Deterministic: the same YAML always produces the same ``RuleSet``
      and checksum.
    - Adding a pay frequency or a jurisdiction is a table change only.

Failure modes:
    - ``FileNotFoundError`` -- the rules path does not exist.
    - ``RuleTableError`` -- the table is structurally invalid.

Audit relevance:
    Every successful ``get_active_rules()`` call emits a
    ``PAYROLL_RULES_TRACE`` log entry with the table version, checksum and
    source path, tying each computed calendar to the table that produced it.
"""

from __future__ import annotations

import os
from pathlib import Path

from payroll_config.loader import compute_checksum, load_rule_set, parse_rule_set
from payroll_config.schema import RuleSet
from payroll_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_RULES_PATH = Path(__file__).parent / "rules" / "default.yaml"
RULES_PATH_ENV = "PAYROLL_RULES_PATH"


def get_active_rules(rules_path: Path | str | None = None) -> RuleSet:
    """The ONLY public rule-table entrypoint.

    Resolution order for the table location: the ``rules_path`` argument,
    then the ``PAYROLL_RULES_PATH`` environment variable, then the bundled
    ``rules/default.yaml``.

    Raises:
        FileNotFoundError: If the table does not exist.
        RuleTableError: If the table fails structural validation.
    """
    path = Path(rules_path or os.environ.get(RULES_PATH_ENV) or DEFAULT_RULES_PATH)
    rules = load_rule_set(path)

    _logger.info(
        "PAYROLL_RULES_TRACE",
        extra={
            "trace_type": "PAYROLL_RULES_TRACE",
            "rules_version": rules.version,
            "checksum": rules.checksum,
            "source": rules.source,
            "frequency_count": len(rules.pay_frequencies),
            "jurisdiction_count": len(rules.jurisdictions),
        },
    )
    return rules


__all__ = [
    "DEFAULT_RULES_PATH",
    "RULES_PATH_ENV",
    "RuleSet",
    "compute_checksum",
    "get_active_rules",
    "load_rule_set",
    "parse_rule_set",
]
