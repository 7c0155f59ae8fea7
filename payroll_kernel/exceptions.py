"""
Typed Exception Hierarchy for the Payroll Compliance Core.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers decide whether to retry, resubmit or escalate based on the kind of
failure.  Parsing message strings for that decision is fragile, so every
failure mode has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (the failing input, the found state)

Example - WRONG way to handle errors:
    try:
        service.approve(batch_id, company_id, actor_id)
    except Exception as e:
        if "PENDING_APPROVAL" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        service.approve(batch_id, company_id, actor_id)
    except InvalidStateError as e:
        api_response(code=e.code, required=e.required, found=e.found)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollCoreError (base)
    |
    +-- ConfigurationError
    |   +-- RuleTableError
    |
    +-- ValidationError
    |
    +-- InvalidStateError
    |
    +-- NotFoundError
    |   +-- BatchNotFoundError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR    | Unknown pay frequency / jurisdiction code
                | RULE_TABLE_INVALID     | YAML rule table is malformed
----------------|------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR       | Bad year/month, missing reject notes
----------------|------------------------|-----------------------------------------
State           | INVALID_STATE          | Approval transition guard not satisfied
----------------|------------------------|-----------------------------------------
Lookup          | NOT_FOUND              | Entity unknown
                | BATCH_NOT_FOUND        | Batch unknown or outside tenant scope
----------------|------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION | Update/delete of an audit record

===============================================================================
PROPAGATION
===============================================================================

Configuration and validation errors surface immediately with the failing
input named.  State-machine errors are raised before any mutation, or from
the compare-and-set step which mutates nothing when it fails.  Services
roll back their session and re-raise; the HTTP layer maps codes to status
codes.
"""


class PayrollCoreError(Exception):
    """
    Base exception for all payroll core errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_CORE_ERROR"

    def to_dict(self) -> dict[str, object]:
        """Structured payload: code, message, and public attributes."""
        payload: dict[str, object] = {"error": self.code, "message": str(self)}
        for key, value in vars(self).items():
            if not key.startswith("_"):
                payload[key] = value
        return payload


# Configuration-related exceptions


class ConfigurationError(PayrollCoreError):
    """Unknown pay frequency or jurisdiction code.  No partial output."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, kind: str, unknown_code: str, known: tuple[str, ...] = ()):
        self.kind = kind
        self.unknown_code = unknown_code
        self.known = tuple(known)
        message = f"Unknown {kind} '{unknown_code}'"
        if known:
            message += f" (known: {', '.join(known)})"
        super().__init__(message)


class RuleTableError(ConfigurationError):
    """A YAML rule table could not be parsed into rule definitions."""

    code: str = "RULE_TABLE_INVALID"

    def __init__(self, source: str, reason: str):
        self.kind = "rule table"
        self.unknown_code = source
        self.known = ()
        self.source = source
        self.reason = reason
        Exception.__init__(self, f"Invalid rule table {source}: {reason}")


# Validation-related exceptions


class ValidationError(PayrollCoreError):
    """Request input is missing or malformed."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


# State-machine exceptions


class InvalidStateError(PayrollCoreError):
    """
    A transition was attempted from a state that does not satisfy its guard.

    The message always names the precondition and the state actually found,
    e.g. "reject requires approval status PENDING_APPROVAL, found APPROVED".
    """

    code: str = "INVALID_STATE"

    def __init__(self, action: str, required: str, found: str):
        self.action = action
        self.required = required
        self.found = found
        super().__init__(f"{action} requires {required}, found {found}")


# Lookup exceptions


class NotFoundError(PayrollCoreError):
    """Entity with given ID was not found."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class BatchNotFoundError(NotFoundError):
    """Batch is unknown or belongs to another company."""

    code: str = "BATCH_NOT_FOUND"

    def __init__(self, batch_id: str):
        super().__init__("PayrollBatch", batch_id)


# Immutability exceptions


class ImmutabilityViolationError(PayrollCoreError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
