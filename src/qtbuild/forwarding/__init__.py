"""Forwarding header generation: path resolution, type-name scanning, writing."""

from .paths import canonicalize_target, make_include_statement, resolve_include_path
from .scanner import ClassTokenScanner, TypeNameScanner, read_header_text, scan_header
from .writer import (
    ForwardingHeader,
    plan_filename_headers,
    plan_type_name_headers,
    write_filename_headers,
    write_forwarding_header,
    write_forwarding_headers,
    write_type_name_headers,
)

__all__ = [
    "ClassTokenScanner",
    "ForwardingHeader",
    "TypeNameScanner",
    "canonicalize_target",
    "make_include_statement",
    "plan_filename_headers",
    "plan_type_name_headers",
    "read_header_text",
    "resolve_include_path",
    "scan_header",
    "write_filename_headers",
    "write_forwarding_header",
    "write_forwarding_headers",
    "write_type_name_headers",
]
