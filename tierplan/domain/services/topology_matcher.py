"""
Topology Element Matcher

Architectural Intent:
- Pairs each user topology override with the template element it refines
- Matching is exact and deterministic; failures name the offending
  identifier and list the valid ones in template order

Domain Logic:
- Data tiers match on tier id; an override without a tier id may name the
  tier through its instance configuration id instead
- Every other component matches on instance configuration id
- An override without any identifier matches the template's sole element;
  with more than one template element it is ambiguous, as is leaving the
  identifier out on more than one override or targeting one element twice
"""

from __future__ import annotations
from typing import Optional, Sequence

from tierplan.domain.entities.topology import (
    ComponentKind,
    TopologyElement,
    UserTopologyOverride,
)
from tierplan.domain.errors import (
    AmbiguousTopologyOverride,
    UnmatchedTopologyIdentifier,
)


def template_key(kind: ComponentKind, element: TopologyElement) -> str:
    if kind.matches_by_tier_id:
        return element.id
    return element.instance_configuration_id


def override_key(kind: ComponentKind, override: UserTopologyOverride) -> Optional[str]:
    if kind.matches_by_tier_id:
        return override.id or override.instance_configuration_id
    return override.instance_configuration_id


def valid_identifiers(
    kind: ComponentKind, elements: Sequence[TopologyElement]
) -> list[str]:
    return [template_key(kind, e) for e in elements]


class TopologyMatcher:
    """Matches user overrides to template topology elements."""

    def match(
        self,
        kind: ComponentKind,
        override: UserTopologyOverride,
        elements: Sequence[TopologyElement],
    ) -> TopologyElement:
        identifier = override_key(kind, override)
        if identifier is None:
            if len(elements) == 1:
                return elements[0]
            raise AmbiguousTopologyOverride(
                kind.value,
                "an identifier is required when the template declares "
                f"{len(elements)} topology elements; valid identifiers are "
                + ", ".join(f'"{i}"' for i in valid_identifiers(kind, elements)),
            )

        for element in elements:
            if template_key(kind, element) == identifier:
                return element

        if kind.matches_by_tier_id and not override.id:
            for element in elements:
                if element.instance_configuration_id == identifier:
                    return element

        raise UnmatchedTopologyIdentifier(
            kind.value, identifier, valid_identifiers(kind, elements)
        )

    def match_all(
        self,
        kind: ComponentKind,
        overrides: Sequence[UserTopologyOverride],
        elements: Sequence[TopologyElement],
    ) -> list[tuple[UserTopologyOverride, TopologyElement]]:
        """Match every override, in override order."""
        unidentified = [o for o in overrides if override_key(kind, o) is None]
        if len(unidentified) > 1:
            raise AmbiguousTopologyOverride(
                kind.value,
                f"{len(unidentified)} topology elements omit their identifier; "
                "at most one may do so",
            )

        pairs: list[tuple[UserTopologyOverride, TopologyElement]] = []
        seen: set[int] = set()
        for override in overrides:
            element = self.match(kind, override, elements)
            position = next(i for i, e in enumerate(elements) if e is element)
            if position in seen:
                raise AmbiguousTopologyOverride(
                    kind.value,
                    f'topology element "{template_key(kind, element)}" '
                    "is configured more than once",
                )
            seen.add(position)
            pairs.append((override, element))
        return pairs
