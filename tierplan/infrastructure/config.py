"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to platform minimums, the role-migration threshold
  and poller settings
- Falls back to the platform defaults when the config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- resolution_policy() turns the loaded values into the policy object the
  domain services take, so nothing in the domain reads configuration itself
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json
import logging
import os

from tierplan.domain.services.defaulting_rules import (
    MINIMUM_APM_SIZE,
    MINIMUM_ENTERPRISE_SEARCH_SIZE,
    MINIMUM_INTEGRATIONS_SERVER_SIZE,
    MINIMUM_KIBANA_SIZE,
    MINIMUM_ZONE_COUNT,
    ResolutionPolicy,
    default_policy,
)
from tierplan.domain.value_objects.stack_version import StackVersion
from tierplan.domain.value_objects.topology_size import DEFAULT_SIZE_RESOURCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizingConfig:
    """Platform minimums applied to template-derived topology elements."""
    kibana_minimum_size: int = MINIMUM_KIBANA_SIZE
    apm_minimum_size: int = MINIMUM_APM_SIZE
    integrations_server_minimum_size: int = MINIMUM_INTEGRATIONS_SERVER_SIZE
    enterprise_search_minimum_size: int = MINIMUM_ENTERPRISE_SEARCH_SIZE
    minimum_zone_count: int = MINIMUM_ZONE_COUNT
    default_size_resource: str = DEFAULT_SIZE_RESOURCE


@dataclass(frozen=True)
class RolesConfig:
    """Node-role migration settings."""
    node_roles_minimum_version: str = "7.10.0"


@dataclass(frozen=True)
class PollerConfig:
    """Plan-completion poller settings."""
    poll_interval_seconds: float = 2.0
    max_retries: int = 4


@dataclass(frozen=True)
class TierplanConfig:
    """Root configuration for the tierplan application."""
    sizing: SizingConfig = field(default_factory=SizingConfig)
    roles: RolesConfig = field(default_factory=RolesConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    log_level: str = "WARNING"

    def resolution_policy(self) -> ResolutionPolicy:
        return default_policy(
            kibana_minimum_size=self.sizing.kibana_minimum_size,
            apm_minimum_size=self.sizing.apm_minimum_size,
            integrations_server_minimum_size=self.sizing.integrations_server_minimum_size,
            enterprise_search_minimum_size=self.sizing.enterprise_search_minimum_size,
            minimum_zone_count=self.sizing.minimum_zone_count,
            default_size_resource=self.sizing.default_size_resource,
            node_roles_minimum_version=StackVersion.parse(
                self.roles.node_roles_minimum_version
            ),
        )


_TOP_LEVEL_KEYS = ("log_level",)


def _env_override(data: dict, prefix: str = "TIERPLAN") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern TIERPLAN_SECTION_KEY.
    For example: TIERPLAN_SIZING_KIBANA_MINIMUM_SIZE=2048,
    TIERPLAN_POLLER_MAX_RETRIES=10, TIERPLAN_LOG_LEVEL=DEBUG
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in _TOP_LEVEL_KEYS:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
        elif len(parts) == 1:
            data[parts[0]] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string numbers to int/float/bool
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                filtered[f.name] = int(filtered[f.name])
            elif f.type == "float":
                filtered[f.name] = float(filtered[f.name])
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "TIERPLAN",
) -> TierplanConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (TIERPLAN_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to tierplan.json in CWD.
        env_prefix: Environment variable prefix. Defaults to TIERPLAN.
    """
    config_path = Path(path) if path else Path("tierplan.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return TierplanConfig(
        sizing=_build_sub_config(SizingConfig, data.get("sizing", {})),
        roles=_build_sub_config(RolesConfig, data.get("roles", {})),
        poller=_build_sub_config(PollerConfig, data.get("poller", {})),
        log_level=data.get("log_level", "WARNING"),
    )
