"""
Rule Table Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML rule table and parses it into the frozen rule types of
``payroll_kernel.domain.rules``, assembled into a ``RuleSet``.  The single
public entry point for runtime rules is
``payroll_config.get_active_rules()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel domain
types only; never on engines or services.

Invariants enforced
-------------------
* No silent defaults for required fields: every step and deadline row must
  carry the parameters its kind requires, with values in range.
* Every parsed object is a frozen dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  table for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid table  -> ``RuleTableError`` naming the source and
  the offending entry.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import RuleSet
from payroll_kernel.domain.rules import (
    DEADLINE_RULE_PARAMETERS,
    STEP_PARAMETERS,
    WEEKDAYS,
    DeadlineRule,
    FrequencyRule,
    JurisdictionRules,
    ReconciliationSettings,
    ScheduleStep,
)
from payroll_kernel.domain.schedule import DeadlineCategory
from payroll_kernel.exceptions import PayrollCoreError, RuleTableError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_weekday(value: Any) -> int:
    """Parse a weekday name (``FRIDAY``) or number (0=Monday)."""
    if isinstance(value, str) and value.upper() in WEEKDAYS:
        return WEEKDAYS[value.upper()]
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    raise ValueError(f"Cannot parse weekday from {value!r}")


def _parse_day(value: Any, field: str = "day") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 31:
        raise ValueError(f"{field} must be an integer 1..31, got {value!r}")
    return value


def _require(data: dict[str, Any], kind: str, required: tuple[str, ...]) -> None:
    missing = [name for name in required if data.get(name) is None]
    if missing:
        raise ValueError(f"{kind} requires {', '.join(missing)}")


def parse_schedule_step(data: dict[str, Any]) -> ScheduleStep:
    """Parse one pay-frequency step."""
    kind = data["kind"]
    if kind not in STEP_PARAMETERS:
        raise ValueError(
            f"unknown step kind {kind!r} (known: {', '.join(STEP_PARAMETERS)})"
        )
    _require(data, kind, STEP_PARAMETERS[kind])
    return ScheduleStep(
        kind=kind,
        day=_parse_day(data["day"]) if "day" in STEP_PARAMETERS[kind] else None,
        weekday=(
            parse_weekday(data["weekday"])
            if "weekday" in STEP_PARAMETERS[kind] else None
        ),
        anchor=(
            parse_date(data["anchor"]) if "anchor" in STEP_PARAMETERS[kind] else None
        ),
    )


def parse_frequency(code: str, data: dict[str, Any]) -> FrequencyRule:
    """Parse a named pay frequency and its steps."""
    steps = data["steps"]
    if not isinstance(steps, list) or not steps:
        raise ValueError("steps must be a non-empty list")
    return FrequencyRule(
        code=code,
        steps=tuple(parse_schedule_step(s) for s in steps),
        description=data.get("description", ""),
    )


def parse_deadline_rule(data: dict[str, Any]) -> DeadlineRule:
    """Parse one labelled deadline row."""
    rule = data["rule"]
    kind = rule["kind"]
    if kind not in DEADLINE_RULE_PARAMETERS:
        raise ValueError(
            f"unknown deadline rule kind {kind!r} "
            f"(known: {', '.join(DEADLINE_RULE_PARAMETERS)})"
        )
    _require(rule, kind, DEADLINE_RULE_PARAMETERS[kind])
    month = None
    if "month" in DEADLINE_RULE_PARAMETERS[kind]:
        month = rule["month"]
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ValueError(f"month must be an integer 1..12, got {month!r}")
    return DeadlineRule(
        label=str(data["label"]),
        category=DeadlineCategory(data["category"]),
        kind=kind,
        day=_parse_day(rule["day"]),
        month=month,
    )


def parse_jurisdiction(code: str, data: dict[str, Any]) -> JurisdictionRules:
    """Parse a jurisdiction deadline table, preserving row order."""
    return JurisdictionRules(
        code=code,
        deadlines=tuple(parse_deadline_rule(d) for d in data["deadlines"]),
        name=data.get("name", ""),
        currency_symbol=data.get("currency_symbol", ""),
    )


def parse_reconciliation_settings(data: dict[str, Any]) -> ReconciliationSettings:
    """Parse the reconciliation section; absent keys take the engine defaults."""
    defaults = ReconciliationSettings()
    return ReconciliationSettings(
        salary_change_threshold_percent=data.get(
            "salary_change_threshold_percent",
            defaults.salary_change_threshold_percent,
        ),
        deduction_change_threshold_percent=data.get(
            "deduction_change_threshold_percent",
            defaults.deduction_change_threshold_percent,
        ),
        sort_order=data.get("sort_order", defaults.sort_order),
        percent_places=data.get("percent_places", defaults.percent_places),
    )


def parse_rule_set(data: dict[str, Any], source: str = "<memory>") -> RuleSet:
    """
    Parse a whole rule table.

    Raises:
        RuleTableError: naming ``source`` and the offending entry.
    """
    context = "table"
    try:
        context = "pay_frequencies"
        frequencies = {
            str(code): parse_frequency(str(code), body)
            for code, body in (data.get("pay_frequencies") or {}).items()
        }
        context = "jurisdictions"
        jurisdictions = {
            str(code): parse_jurisdiction(str(code), body)
            for code, body in (data.get("jurisdictions") or {}).items()
        }
        context = "reconciliation"
        reconciliation = parse_reconciliation_settings(
            data.get("reconciliation") or {},
        )
    except KeyError as exc:
        raise RuleTableError(source, f"{context}: missing key {exc.args[0]!r}") from exc
    except (AttributeError, TypeError, ValueError, PayrollCoreError) as exc:
        raise RuleTableError(source, f"{context}: {exc}") from exc

    if not frequencies:
        raise RuleTableError(source, "no pay_frequencies defined")
    if not jurisdictions:
        raise RuleTableError(source, "no jurisdictions defined")

    return RuleSet(
        version=str(data.get("version", "0")),
        pay_frequencies=frequencies,
        jurisdictions=jurisdictions,
        reconciliation=reconciliation,
        checksum=compute_checksum(data),
        source=source,
    )


def load_rule_set(path: Path) -> RuleSet:
    """Load and parse a YAML rule table from ``path``."""
    data = load_yaml_file(path)
    if not isinstance(data, dict):
        raise RuleTableError(str(path), "top level must be a mapping")
    return parse_rule_set(data, source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
