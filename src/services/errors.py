"""Exception classes raised by the allocation engine.

Each error carries a stable machine-readable ``code``; entry points (CLI,
HTTP handlers) turn them into exit codes or error responses. Nothing in the
engine retries.
"""


class AllocationError(Exception):
    """Base exception for allocation engine errors."""

    code = "allocation_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(AllocationError):
    """Referenced expense, period, rule or scope record does not exist."""

    code = "not_found"


class ConfigurationError(AllocationError):
    """Data or configuration defect; never silently defaulted."""

    code = "invalid_configuration"


class UnsupportedTargetTypeError(ConfigurationError):
    code = "unsupported_target_type"

    def __init__(self, target_type: str):
        self.target_type = target_type
        super().__init__(f"Unsupported target type {target_type!r}")


class UnsupportedMethodError(ConfigurationError):
    code = "unsupported_method"

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported allocation method {method!r}")


class AmbiguousRuleError(ConfigurationError):
    """Several community rules qualify as fallback and none is marked default."""

    code = "ambiguous_rule"


__all__ = [
    "AllocationError",
    "NotFoundError",
    "ConfigurationError",
    "UnsupportedTargetTypeError",
    "UnsupportedMethodError",
    "AmbiguousRuleError",
]
