"""Feature and define model.

Qt is configured through two kinds of macros:
- Feature flags: named booleans rendered as ``QT_FEATURE_<name>``
- Defines: literal ``#define KEY VALUE`` substitutions

Both come in four layers: global or module scope, each either public or
private. A ConfigLayer holds the features and defines of one scope.

Design:
    Layers are immutable. Setting a feature or define returns a new layer.
    Names are unique within a layer: setting an existing name replaces its
    value and keeps its original position, so the rendered header order is
    the order in which names were first introduced.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Tuple, TypeVar


class Scope(Enum):
    """Configuration layer a feature or define belongs to.

    The value is the ModuleConfig field holding the layer.
    """

    GLOBAL_PUBLIC = "global_public"
    GLOBAL_PRIVATE = "global_private"
    MODULE_PUBLIC = "module_public"
    MODULE_PRIVATE = "module_private"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FeatureFlag:
    """A named boolean controlling a QT_FEATURE_* macro."""

    name: str
    enabled: bool


@dataclass(frozen=True)
class DefineEntry:
    """A literal macro substitution. The value is emitted verbatim."""

    key: str
    value: str


_Entry = TypeVar("_Entry", FeatureFlag, DefineEntry)


def _upsert(entries: Tuple[_Entry, ...], entry: _Entry, key: Callable[[_Entry], str]) -> Tuple[_Entry, ...]:
    """Replace the entry with the same key in place, or append it."""
    name = key(entry)
    for index, existing in enumerate(entries):
        if key(existing) == name:
            return entries[:index] + (entry,) + entries[index + 1 :]
    return entries + (entry,)


@dataclass(frozen=True)
class ConfigLayer:
    """Features and defines of one configuration scope.

    Attributes:
        features: Feature flags in first-insertion order
        defines: Defines in first-insertion order
    """

    features: Tuple[FeatureFlag, ...] = ()
    defines: Tuple[DefineEntry, ...] = ()

    def with_feature(self, name: str, enabled: bool) -> "ConfigLayer":
        """Return a copy with the feature set (last write wins)."""
        return replace(self, features=_upsert(self.features, FeatureFlag(name, bool(enabled)), lambda f: f.name))

    def with_define(self, key: str, value: str) -> "ConfigLayer":
        """Return a copy with the define set (last write wins)."""
        return replace(self, defines=_upsert(self.defines, DefineEntry(key, str(value)), lambda d: d.key))

    def with_features(self, features: Iterable[Tuple[str, bool]]) -> "ConfigLayer":
        layer = self
        for name, enabled in features:
            layer = layer.with_feature(name, enabled)
        return layer

    def with_defines(self, defines: Iterable[Tuple[str, str]]) -> "ConfigLayer":
        layer = self
        for key, value in defines:
            layer = layer.with_define(key, value)
        return layer

    def feature(self, name: str) -> bool | None:
        """Look up a feature by name. Returns None if it is not set."""
        for flag in self.features:
            if flag.name == name:
                return flag.enabled
        return None

    def define(self, key: str) -> str | None:
        """Look up a define by key. Returns None if it is not set."""
        for entry in self.defines:
            if entry.key == key:
                return entry.value
        return None

    def is_empty(self) -> bool:
        return not self.features and not self.defines
