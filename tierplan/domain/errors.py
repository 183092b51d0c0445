"""
Topology Errors

Architectural Intent:
- Validation-time errors raised synchronously while resolving or projecting
- Each error carries the offending value and, where useful, the valid
  alternatives, so a human can fix the declarative input
- None of these are retried; they propagate to the caller unchanged
"""

from __future__ import annotations
from typing import Sequence


class TopologyError(ValueError):
    """Base class for all configuration errors raised by the resolution engine."""


class InvalidSizeFormat(TopologyError):
    def __init__(self, value: str, detail: str = "") -> None:
        self.value = value
        message = f'invalid size "{value}": expected a number with an optional "g" suffix'
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidTopologySize(TopologyError):
    def __init__(self, identifier: str, size: int) -> None:
        self.identifier = identifier
        self.size = size
        super().__init__(
            f"topology {identifier}: size must not be negative, got {size}"
        )


class InvalidZoneCount(TopologyError):
    def __init__(self, identifier: str, zone_count: int) -> None:
        self.identifier = identifier
        self.zone_count = zone_count
        super().__init__(
            f"topology {identifier}: zone_count must be a positive integer, got {zone_count}"
        )


class UnmatchedTopologyIdentifier(TopologyError):
    def __init__(
        self,
        component: str,
        identifier: str,
        valid_identifiers: Sequence[str],
    ) -> None:
        self.component = component
        self.identifier = identifier
        self.valid_identifiers = tuple(valid_identifiers)
        quoted = ", ".join(f'"{i}"' for i in self.valid_identifiers)
        super().__init__(
            f'{component} topology: invalid id "{identifier}": '
            f"valid topology IDs are {quoted or '(none)'}"
        )


class AmbiguousTopologyOverride(TopologyError):
    def __init__(self, component: str, reason: str) -> None:
        self.component = component
        self.reason = reason
        super().__init__(f"{component} topology: {reason}")


class UnsupportedComponentForTemplate(TopologyError):
    def __init__(self, component: str, template_id: str) -> None:
        self.component = component
        self.template_id = template_id
        super().__init__(
            f"{component} specified but deployment template {template_id!r} is not "
            f"configured for it. Use a different template if you wish to add {component}"
        )


class InvalidSettingsJSON(TopologyError):
    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"failed expanding {field}: {detail}")


class InvalidVersion(TopologyError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"version {value!r} is not semver compliant")


class InvalidNodeType(TopologyError):
    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"failed parsing {field} value: {value!r} is not a boolean")
