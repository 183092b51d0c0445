"""
Stack Version Value Object

Architectural Intent:
- Immutable semantic version of the deployed product stack
- Single place where the node-role migration boundary is decided
  (behavior_for), consulted once per resolution pass

Design Decisions:
- Strict MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD] parsing; anything else is an
  InvalidVersion configuration error
- A pre-release sorts before its release (7.10.0-SNAPSHOT < 7.10.0)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from functools import total_ordering
from typing import Optional
import re

from tierplan.domain.errors import InvalidVersion

_SEMVER_RE = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)


@total_ordering
@dataclass(frozen=True)
class StackVersion:
    major: int
    minor: int
    patch: int
    prerelease: str = ""

    @staticmethod
    def parse(value: str) -> "StackVersion":
        m = _SEMVER_RE.match(value.strip()) if isinstance(value, str) else None
        if not m:
            raise InvalidVersion(str(value))
        return StackVersion(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            prerelease=m.group(4) or "",
        )

    def _key(self) -> tuple:
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.prerelease else 1,
            self.prerelease,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StackVersion):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


# First version where tiers are described by an explicit node_roles list.
NODE_ROLES_MINIMUM_VERSION = StackVersion(7, 10, 0)


class NodeRoleMode(Enum):
    NODE_TYPES = auto()
    NODE_ROLES = auto()


def behavior_for(
    version: str | StackVersion,
    previous_version: Optional[str | StackVersion] = None,
    threshold: StackVersion = NODE_ROLES_MINIMUM_VERSION,
) -> NodeRoleMode:
    """Decide which role representation a resolution pass must produce.

    At or above the threshold node roles are used, except for the single step
    that upgrades a deployment from below the threshold to at/above it: that
    step keeps the legacy node types and the roles are adopted on the next one.
    """
    current = version if isinstance(version, StackVersion) else StackVersion.parse(version)
    if current < threshold:
        return NodeRoleMode.NODE_TYPES

    if previous_version:
        previous = (
            previous_version
            if isinstance(previous_version, StackVersion)
            else StackVersion.parse(previous_version)
        )
        if previous < threshold:
            return NodeRoleMode.NODE_TYPES

    return NodeRoleMode.NODE_ROLES
