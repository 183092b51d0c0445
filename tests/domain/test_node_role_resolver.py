"""Tests for NodeRoleResolver."""

import pytest

from tierplan.domain.services.node_role_resolver import NodeRoleResolver
from tierplan.domain.value_objects.node_roles import NodeRoles, NodeTypes

HOT_ROLES = NodeRoles.of(["data_content", "data_hot", "ingest", "master"])


@pytest.fixture
def resolver():
    return NodeRoleResolver()


class TestNodeRoles:
    def test_sorted_and_deduplicated(self):
        assert NodeRoles.of(["master", "data_hot", "master"]).roles == ("data_hot", "master")

    def test_to_node_types(self):
        assert HOT_ROLES.to_node_types() == NodeTypes(
            data=True, master=True, ingest=True, ml=False
        )


class TestNodeRolesMode:
    def test_explicit_roles_taken_verbatim(self, resolver):
        roles = resolver.resolve("8.5.0", ["master", "data_hot"], template=HOT_ROLES)
        assert roles == NodeRoles.of(["data_hot", "master"])

    def test_template_roles_kept_without_overrides(self, resolver):
        assert resolver.resolve("7.10.0", template=HOT_ROLES) == HOT_ROLES

    def test_empty_role_list_falls_back_to_template(self, resolver):
        assert resolver.resolve("8.0.0", [], template=HOT_ROLES) == HOT_ROLES

    def test_false_flag_removes_role(self, resolver):
        roles = resolver.resolve("8.0.0", node_types=NodeTypes(master=False), template=HOT_ROLES)
        assert roles == NodeRoles.of(["data_content", "data_hot", "ingest"])

    def test_false_data_flag_removes_every_data_role(self, resolver):
        roles = resolver.resolve("8.0.0", node_types=NodeTypes(data=False), template=HOT_ROLES)
        assert roles == NodeRoles.of(["ingest", "master"])

    def test_true_flag_adds_role(self, resolver):
        roles = resolver.resolve("8.0.0", node_types=NodeTypes(ml=True), template=HOT_ROLES)
        assert roles.has("ml")

    def test_true_data_flag_keeps_existing_data_roles(self, resolver):
        roles = resolver.resolve("8.0.0", node_types=NodeTypes(data=True), template=HOT_ROLES)
        assert roles == HOT_ROLES

    def test_legacy_template_translated(self, resolver):
        template = NodeTypes(data=True, master=True, ingest=False, ml=False)
        assert resolver.resolve("7.10.0", template=template) == NodeRoles.of(["data", "master"])

    def test_nothing_to_resolve(self, resolver):
        assert resolver.resolve("8.0.0") is None


class TestNodeTypesMode:
    def test_explicit_roles_ignored(self, resolver):
        template = NodeTypes(data=False, master=True, ingest=True, ml=False)
        result = resolver.resolve(
            "7.9.3", ["master"], NodeTypes(data=True), template=template
        )
        assert result == NodeTypes(data=True, master=True, ingest=True, ml=False)

    def test_unset_flags_keep_template(self, resolver):
        template = NodeTypes(data=True, master=True, ingest=True, ml=False)
        assert resolver.resolve("7.9.3", node_types=NodeTypes(), template=template) == template

    def test_role_template_translated(self, resolver):
        result = resolver.resolve("7.9.3", template=HOT_ROLES)
        assert result == NodeTypes(data=True, master=True, ingest=True, ml=False)

    def test_nothing_to_resolve(self, resolver):
        assert resolver.resolve("7.9.3", ["master"]) is None


class TestMigrationBoundary:
    @pytest.mark.parametrize(
        "version,expected_type",
        [
            ("7.9.3", NodeTypes),
            ("7.10.0", NodeRoles),
            ("7.11.0", NodeRoles),
        ],
    )
    def test_representation_at_boundary(self, resolver, version, expected_type):
        result = resolver.resolve(
            version, ["master", "data_hot"], NodeTypes(ml=False), template=HOT_ROLES
        )
        assert isinstance(result, expected_type)

    def test_upgrade_step_keeps_node_types(self, resolver):
        result = resolver.resolve(
            "7.10.0", ["master"], template=HOT_ROLES, previous_version="7.9.3"
        )
        assert isinstance(result, NodeTypes)

    def test_custom_threshold(self):
        from tierplan.domain.value_objects.stack_version import StackVersion

        resolver = NodeRoleResolver(StackVersion(8, 0, 0))
        assert isinstance(resolver.resolve("7.17.0", template=HOT_ROLES), NodeTypes)
