"""Tests for TopologyMatcher."""

import pytest

from tierplan.domain.entities.topology import ComponentKind, UserTopologyOverride
from tierplan.domain.errors import (
    AmbiguousTopologyOverride,
    UnmatchedTopologyIdentifier,
)
from tierplan.domain.services.topology_matcher import TopologyMatcher

ES = ComponentKind.ELASTICSEARCH
KIBANA = ComponentKind.KIBANA


@pytest.fixture
def matcher():
    return TopologyMatcher()


@pytest.fixture
def es_elements(template):
    return template.component(ES).topology


@pytest.fixture
def kibana_elements(template):
    return template.component(KIBANA).topology


class TestMatchByIdentifier:
    def test_tier_id(self, matcher, es_elements):
        element = matcher.match(ES, UserTopologyOverride(id="warm"), es_elements)
        assert element.id == "warm"

    def test_tier_by_instance_configuration(self, matcher, es_elements):
        element = matcher.match(
            ES, UserTopologyOverride(instance_configuration_id="aws.master.r5d"), es_elements
        )
        assert element.id == "master"

    def test_component_by_instance_configuration(self, matcher, kibana_elements):
        element = matcher.match(
            KIBANA,
            UserTopologyOverride(instance_configuration_id="aws.kibana.r5d"),
            kibana_elements,
        )
        assert element is kibana_elements[0]

    def test_sole_element_matches_without_identifier(self, matcher, kibana_elements):
        element = matcher.match(KIBANA, UserTopologyOverride(size="1g"), kibana_elements)
        assert element is kibana_elements[0]


class TestMatchFailures:
    def test_unknown_tier_lists_template_order(self, matcher, es_elements):
        with pytest.raises(UnmatchedTopologyIdentifier) as exc_info:
            matcher.match(ES, UserTopologyOverride(id="hot"), es_elements)

        err = exc_info.value
        assert err.identifier == "hot"
        assert err.valid_identifiers == (
            "hot_content", "warm", "master", "coordinating", "ml",
        )
        assert 'invalid id "hot"' in str(err)
        assert '"hot_content", "warm"' in str(err)

    def test_unknown_instance_configuration(self, matcher, kibana_elements):
        with pytest.raises(UnmatchedTopologyIdentifier) as exc_info:
            matcher.match(
                KIBANA,
                UserTopologyOverride(instance_configuration_id="aws.kibana.unknown"),
                kibana_elements,
            )
        assert exc_info.value.identifier == "aws.kibana.unknown"
        assert exc_info.value.valid_identifiers == ("aws.kibana.r5d",)

    def test_missing_identifier_with_several_elements(self, matcher, es_elements):
        with pytest.raises(AmbiguousTopologyOverride, match="identifier is required"):
            matcher.match(ES, UserTopologyOverride(size="2g"), es_elements)

    def test_deterministic(self, matcher, es_elements):
        override = UserTopologyOverride(id="frozen")
        messages = set()
        for _ in range(3):
            with pytest.raises(UnmatchedTopologyIdentifier) as exc_info:
                matcher.match(ES, override, es_elements)
            messages.add(str(exc_info.value))
        assert len(messages) == 1

        first = matcher.match(ES, UserTopologyOverride(id="ml"), es_elements)
        second = matcher.match(ES, UserTopologyOverride(id="ml"), es_elements)
        assert first is second


class TestMatchAll:
    def test_pairs_in_override_order(self, matcher, es_elements):
        pairs = matcher.match_all(
            ES,
            [UserTopologyOverride(id="warm"), UserTopologyOverride(id="hot_content")],
            es_elements,
        )
        assert [e.id for _, e in pairs] == ["warm", "hot_content"]

    def test_more_than_one_unidentified(self, matcher, kibana_elements):
        with pytest.raises(AmbiguousTopologyOverride, match="omit their identifier"):
            matcher.match_all(
                KIBANA,
                [UserTopologyOverride(size="1g"), UserTopologyOverride(size="2g")],
                kibana_elements,
            )

    def test_same_element_twice(self, matcher, es_elements):
        with pytest.raises(AmbiguousTopologyOverride, match="more than once"):
            matcher.match_all(
                ES,
                [
                    UserTopologyOverride(id="warm"),
                    UserTopologyOverride(instance_configuration_id="aws.data.highstorage.d3"),
                ],
                es_elements,
            )
