"""
Topology Size Value Object

Architectural Intent:
- Immutable (value, resource) pair describing the capacity of a topology element
- Parses human-readable sizes ("2g", "1.5g", "512") into integer base units
- Formats integer base units back into the "g"-suffixed declarative form

Design Decisions:
- The base capacity unit is the megabyte; "g" multiplies by 1024
- Decimal arithmetic keeps fractional gigabytes exact, so every value that
  format_size() emits is accepted by parse_size() and maps back to itself
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import re

from tierplan.domain.errors import InvalidSizeFormat

DEFAULT_SIZE_RESOURCE = "memory"

# Smallest size increment the platform hands out.
MINIMUM_GRANULARITY = 128

_UNITS_PER_GB = 1024

_SIZE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*([gG])?\s*$")


def parse_size(value: str) -> int:
    """Parse a size string into base capacity units.

    "2g" -> 2048, "1.5g" -> 1536, "512" -> 512. A leading minus sign is
    accepted here so callers can report a negative size as a topology error
    rather than a format error.
    """
    if not isinstance(value, str):
        raise InvalidSizeFormat(str(value), "not a string")

    m = _SIZE_RE.match(value)
    if not m:
        raise InvalidSizeFormat(value)

    try:
        number = Decimal(m.group(1))
    except InvalidOperation:
        raise InvalidSizeFormat(value)

    if m.group(2):
        number = number * _UNITS_PER_GB

    if number != number.to_integral_value():
        raise InvalidSizeFormat(value, "does not resolve to a whole number of units")

    return int(number)


def format_size(value: int) -> str:
    """Format base capacity units as a "g"-suffixed size string.

    Whole gigabytes are written without a fraction (2048 -> "2g"); anything
    else uses the shortest exact decimal (1536 -> "1.5g", 128 -> "0.125g").
    """
    if value % _UNITS_PER_GB == 0:
        return f"{value // _UNITS_PER_GB}g"
    gigabytes = (Decimal(value) / Decimal(_UNITS_PER_GB)).normalize()
    return f"{format(gigabytes, 'f')}g"


@dataclass(frozen=True)
class TopologySize:
    """
    Value Object for a resource-kind-tagged capacity, e.g. 2048/memory.
    """
    value: int
    resource: str = DEFAULT_SIZE_RESOURCE

    def __post_init__(self) -> None:
        if not self.resource:
            raise ValueError("TopologySize resource cannot be empty")

    @staticmethod
    def parse(size: str, resource: str | None = None) -> "TopologySize":
        return TopologySize(parse_size(size), resource or DEFAULT_SIZE_RESOURCE)

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"{format_size(self.value)}/{self.resource}"
