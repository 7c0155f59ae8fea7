"""
Payroll rule set schema.

The ``RuleSet`` is the runtime artifact produced from a YAML rule table:
pay frequencies, jurisdiction deadline tables and reconciliation settings,
together with the table version and its checksum.  The row types
themselves live in ``payroll_kernel.domain.rules`` so the engines can
consume them without depending on this package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from payroll_kernel.domain.rules import (
    FrequencyRule,
    JurisdictionRules,
    ReconciliationSettings,
)
from payroll_kernel.exceptions import ConfigurationError


@dataclass(frozen=True)
class RuleSet:
    """Frozen, validated rule tables.  Lookups raise ConfigurationError."""

    version: str
    pay_frequencies: Mapping[str, FrequencyRule]
    jurisdictions: Mapping[str, JurisdictionRules]
    reconciliation: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    checksum: str = ""
    source: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "pay_frequencies", MappingProxyType(dict(self.pay_frequencies)),
        )
        object.__setattr__(
            self, "jurisdictions", MappingProxyType(dict(self.jurisdictions)),
        )

    @property
    def frequency_codes(self) -> tuple[str, ...]:
        return tuple(self.pay_frequencies)

    @property
    def jurisdiction_codes(self) -> tuple[str, ...]:
        return tuple(self.jurisdictions)

    def frequency(self, code: str) -> FrequencyRule:
        try:
            return self.pay_frequencies[code]
        except (KeyError, TypeError):
            raise ConfigurationError(
                "pay frequency", str(code), self.frequency_codes,
            ) from None

    def jurisdiction(self, code: str) -> JurisdictionRules:
        try:
            return self.jurisdictions[code]
        except (KeyError, TypeError):
            raise ConfigurationError(
                "jurisdiction", str(code), self.jurisdiction_codes,
            ) from None
