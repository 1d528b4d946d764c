"""Build orchestration and compiler hand-off."""

from .compiler import CompileRequest, CompileResult, CompilerDriver, NativeCompilerDriver
from .layout import OutputLayout
from .orchestrator import (
    BuildOrchestrator,
    BuildResult,
    GeneratedHeaders,
    compile_module,
    generate_module_headers,
)

__all__ = [
    "BuildOrchestrator",
    "BuildResult",
    "CompileRequest",
    "CompileResult",
    "CompilerDriver",
    "GeneratedHeaders",
    "NativeCompilerDriver",
    "OutputLayout",
    "compile_module",
    "generate_module_headers",
]
