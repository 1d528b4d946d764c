"""Packaged default configurations.

A preset is a JSON file next to this module describing a complete Qt
configuration for one platform: the platform-definitions header (relative to
the Qt source root) and the features and defines of all four scopes.
Uses importlib.resources so presets load the same way from a source checkout
and from an installed wheel.

Available presets:
    linux-clang - static QtCore for x86_64 Linux built with clang
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from ...errors import ConfigurationError
from ...module_config import ModuleConfig
from ..features import ConfigLayer, Scope

DEFAULT_PRESET = "linux-clang"


@dataclass(frozen=True)
class Preset:
    """A named, fully specified Qt configuration.

    Attributes:
        name: Preset identifier (file name without .json)
        description: Human-readable description
        platform_defs: qplatformdefs.h path relative to the Qt source root
        layers: Configuration layer for each scope
    """

    name: str
    description: str
    platform_defs: str
    layers: dict[Scope, ConfigLayer] = field(default_factory=dict)

    def layer(self, scope: Scope) -> ConfigLayer:
        return self.layers.get(scope, ConfigLayer())


def list_presets() -> list[str]:
    """Return the names of all packaged presets, sorted."""
    pkg_files = resources.files(__package__)
    return sorted(entry.name[: -len(".json")] for entry in pkg_files.iterdir() if entry.name.endswith(".json"))


def _parse_layer(data: dict[str, Any], preset_name: str, scope: Scope) -> ConfigLayer:
    try:
        features = [(str(name), bool(enabled)) for name, enabled in data.get("features", [])]
        defines = [(str(key), str(value)) for key, value in data.get("defines", [])]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Preset {preset_name!r} has a malformed {scope} section: {e}") from e
    return ConfigLayer().with_features(features).with_defines(defines)


def parse_preset(data: dict[str, Any]) -> Preset:
    """Build a Preset from its decoded JSON document.

    Raises:
        ConfigurationError: If required keys are missing or malformed
    """
    name = data.get("name")
    platform_defs = data.get("platform_defs")
    if not name or not platform_defs:
        raise ConfigurationError("Preset must define 'name' and 'platform_defs'")

    layers = {scope: _parse_layer(data.get(scope.value, {}), name, scope) for scope in Scope}
    return Preset(
        name=name,
        description=data.get("description", ""),
        platform_defs=platform_defs,
        layers=layers,
    )


def load_preset(name: str = DEFAULT_PRESET) -> Preset:
    """Load a packaged preset by name.

    Raises:
        ConfigurationError: If the preset does not exist or cannot be parsed
    """
    preset_file = resources.files(__package__).joinpath(f"{name}.json")
    if not preset_file.is_file():
        available = ", ".join(list_presets())
        raise ConfigurationError(f"Unknown preset {name!r} (available: {available})")

    try:
        with preset_file.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Preset {name!r} is not valid JSON: {e}") from e

    return parse_preset(data)


def apply_preset(config: ModuleConfig, preset: Preset, qt_source_dir: Path | None = None) -> ModuleConfig:
    """Merge a preset into a module configuration.

    Preset entries are applied on top of what the configuration already
    holds, so later calls on the returned value can still override them.

    Args:
        config: Configuration to extend
        preset: Preset to apply
        qt_source_dir: Qt source root; when given, the preset's
            platform-definitions header is resolved against it

    Returns:
        New ModuleConfig with the preset applied
    """
    for scope in Scope:
        layer = preset.layer(scope)
        config = config.with_features(scope, [(f.name, f.enabled) for f in layer.features])
        config = config.with_defines(scope, [(d.key, d.value) for d in layer.defines])

    if qt_source_dir is not None:
        config = config.with_platform_defs(Path(qt_source_dir) / preset.platform_defs)
    return config
