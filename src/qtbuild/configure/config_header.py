"""Configuration header rendering.

Turns feature flags and defines into the text of a Qt configuration header
(qconfig.h, qtcore-config.h, ...). Format:

    #define QT_FEATURE_<name> 1        (enabled)
    #define QT_FEATURE_<name> -1       (disabled)
    <blank line>
    #define <KEY> <VALUE>

Rendering is pure and follows input order, so identical input always yields
byte-identical text. Values are inserted verbatim; malformed macro text is
left for the C preprocessor to reject.
"""

import logging
from pathlib import Path
from typing import Iterable

from ..fsutil import write_text_file
from .features import ConfigLayer, DefineEntry, FeatureFlag

logger = logging.getLogger(__name__)

FEATURE_PREFIX = "QT_FEATURE_"


def make_feature_defines(features: Iterable[FeatureFlag]) -> str:
    """Render QT_FEATURE_* defines, one per line. Empty input renders as ""."""
    return "".join(f"#define {FEATURE_PREFIX}{flag.name} {1 if flag.enabled else -1}\n" for flag in features)


def make_define_string(defines: Iterable[DefineEntry]) -> str:
    """Render ``#define KEY VALUE`` lines. Empty input renders as ""."""
    return "".join(f"#define {entry.key} {entry.value}\n" for entry in defines)


def render_config_header(defines: Iterable[DefineEntry], features: Iterable[FeatureFlag]) -> str:
    """Render a complete configuration header.

    Args:
        defines: Defines in output order
        features: Feature flags in output order

    Returns:
        Feature block, a blank line, then the define block
    """
    return f"{make_feature_defines(features)}\n{make_define_string(defines)}"


def render_layer(layer: ConfigLayer) -> str:
    """Render the configuration header for one scope."""
    return render_config_header(layer.defines, layer.features)


def write_config_header(path: Path, layer: ConfigLayer) -> Path:
    """Render a layer and write it to path.

    Raises:
        WriteFailure: If the file cannot be written
    """
    write_text_file(path, render_layer(layer))
    logger.debug(f"Wrote {path} ({len(layer.features)} features, {len(layer.defines)} defines)")
    return path
