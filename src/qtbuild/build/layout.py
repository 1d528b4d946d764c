"""Output directory layout for one module.

    <out>/<Module>/                        qconfig.h, <module>-config.h, qplatformdefs.h
    <out>/<Module>/private/                qconfig_p.h, <module>-config_p.h
    <out>/forwarding/<Module>/             filename and type-name forwarding headers
    <out>/forwarding/<Module>/private/     private filename forwarding headers

The layout is a pure function of the output directory and module name, so two
runs with the same inputs write exactly the same set of files.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..forwarding.writer import PRIVATE_SUBDIR
from ..module_config import ModuleConfig

FORWARDING_SUBDIR = "forwarding"
GLOBAL_CONFIG_HEADER = "qconfig.h"
GLOBAL_PRIVATE_CONFIG_HEADER = "qconfig_p.h"


@dataclass(frozen=True)
class OutputLayout:
    """Paths of every generated directory and config header for a module."""

    out_dir: Path
    module: str
    config_name: str

    @classmethod
    def for_module(cls, out_dir: Path, config: ModuleConfig) -> "OutputLayout":
        return cls(out_dir=Path(out_dir), module=config.module, config_name=config.config_name)

    @property
    def config_dir(self) -> Path:
        return self.out_dir / self.module

    @property
    def config_private_dir(self) -> Path:
        return self.config_dir / PRIVATE_SUBDIR

    @property
    def forwarding_root(self) -> Path:
        return self.out_dir / FORWARDING_SUBDIR

    @property
    def forwarding_dir(self) -> Path:
        return self.forwarding_root / self.module

    @property
    def forwarding_private_dir(self) -> Path:
        return self.forwarding_dir / PRIVATE_SUBDIR

    @property
    def global_config_header(self) -> Path:
        return self.config_dir / GLOBAL_CONFIG_HEADER

    @property
    def global_private_config_header(self) -> Path:
        return self.config_private_dir / GLOBAL_PRIVATE_CONFIG_HEADER

    @property
    def module_config_header(self) -> Path:
        return self.config_dir / f"{self.config_name}-config.h"

    @property
    def module_private_config_header(self) -> Path:
        return self.config_private_dir / f"{self.config_name}-config_p.h"

    def directories(self) -> Tuple[Path, ...]:
        """Leaf directories to create (parents are created with them)."""
        return (self.config_private_dir, self.forwarding_private_dir)

    def include_dirs(self) -> Tuple[Path, ...]:
        """Compiler include directories, config headers before forwarding headers.

        The roots make ``<QtCore/qobject.h>`` work, the module directories make
        ``<qobject.h>`` and ``<QObject>`` work.
        """
        return (
            self.out_dir,
            self.config_dir,
            self.config_private_dir,
            self.forwarding_root,
            self.forwarding_dir,
            self.forwarding_private_dir,
        )
