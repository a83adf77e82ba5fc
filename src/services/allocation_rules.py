"""Typed allocation methods parsed from AllocationRule rows.

Each method variant carries only the parameters it needs, so the weight
builder never has to interpret a free-form params payload.
"""

from dataclasses import dataclass
from typing import Any, Union

from src.models.allocation_rule import AllocationMethod
from src.services.errors import ConfigurationError, UnsupportedMethodError

SQM_TYPE_CODE = "SQM"
RESIDENTS_TYPE_CODE = "RESIDENTS"
DEFAULT_CONSUMPTION_TYPE_CODE = "WATER_M3"


@dataclass(frozen=True)
class EqualMethod:
    """raw = 1 for every unit."""


@dataclass(frozen=True)
class MeasureMethod:
    """raw = the unit's measured value for ``type_code``."""

    type_code: str


@dataclass(frozen=True)
class MixedPart:
    type_code: str
    weight: float


@dataclass(frozen=True)
class MixedMethod:
    """raw = sum of part.weight * measured value for part.type_code."""

    parts: tuple[MixedPart, ...]


WeightMethod = Union[EqualMethod, MeasureMethod, MixedMethod]


def _section(params: dict[str, Any], key: str) -> dict[str, Any]:
    section = params.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Rule params \"{key}\" must be an object, got {section!r}")
    return section


def _single_type_code(params: dict[str, Any]) -> str:
    single = _section(params, "single")
    return single.get("typeCode") or DEFAULT_CONSUMPTION_TYPE_CODE


def _mixed_parts(params: dict[str, Any]) -> tuple[MixedPart, ...]:
    mixed = _section(params, "mixed")
    raw_parts = mixed.get("parts")
    if raw_parts is None:
        return ()
    if not isinstance(raw_parts, list):
        raise ConfigurationError(f"MIXED parts must be a list, got {raw_parts!r}")
    parts = []
    for raw_part in raw_parts:
        try:
            parts.append(MixedPart(type_code=str(raw_part["typeCode"]), weight=float(raw_part["weight"])))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid MIXED part {raw_part!r}: {e}") from e
    return tuple(parts)


def parse_method(method: str, params: dict[str, Any] | None) -> WeightMethod:
    """Turn a stored (method, params) pair into a typed method variant.

    Args:
        method: Stored method name (e.g. "BY_SQM")
        params: JSON params payload, may be None

    Returns:
        EqualMethod, MeasureMethod or MixedMethod

    Raises:
        UnsupportedMethodError: method name is not recognized
        ConfigurationError: params or MIXED parts are malformed
    """
    try:
        kind = AllocationMethod(method)
    except ValueError:
        raise UnsupportedMethodError(str(method)) from None

    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ConfigurationError(f"Rule params must be an object, got {params!r}")

    if kind is AllocationMethod.EQUAL:
        return EqualMethod()
    if kind is AllocationMethod.BY_SQM:
        return MeasureMethod(SQM_TYPE_CODE)
    if kind is AllocationMethod.BY_RESIDENTS:
        return MeasureMethod(RESIDENTS_TYPE_CODE)
    if kind is AllocationMethod.BY_CONSUMPTION:
        return MeasureMethod(_single_type_code(params))

    parts = _mixed_parts(params)
    # No parts configured falls back to equal weighting
    if not parts:
        return EqualMethod()
    return MixedMethod(parts)


__all__ = [
    "EqualMethod",
    "MeasureMethod",
    "MixedMethod",
    "MixedPart",
    "WeightMethod",
    "parse_method",
    "SQM_TYPE_CODE",
    "RESIDENTS_TYPE_CODE",
    "DEFAULT_CONSUMPTION_TYPE_CODE",
]
