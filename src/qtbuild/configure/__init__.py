"""Qt configure: feature/define model, configuration headers and presets."""

from .config_header import (
    make_define_string,
    make_feature_defines,
    render_config_header,
    render_layer,
    write_config_header,
)
from .features import ConfigLayer, DefineEntry, FeatureFlag, Scope

__all__ = [
    "ConfigLayer",
    "DefineEntry",
    "FeatureFlag",
    "Scope",
    "make_define_string",
    "make_feature_defines",
    "render_config_header",
    "render_layer",
    "write_config_header",
]
