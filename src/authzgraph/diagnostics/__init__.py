"""Diagnostic system for authzgraph errors.

Provides structured error diagnostics with codes, spans, hints, and help URLs.
Inspired by Rust compiler diagnostics.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, SourceSpan
from .errors import (
    AuthzGraphError,
    ModelError,
    ModelLookupError,
    ModelSyntaxError,
    RenderError,
    RewriteDepthExceededError,
    UnsupportedRewriteVariantError,
)
from .formatter import DiagnosticFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "AuthzGraphError",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "ErrorTemplate",
    "ModelError",
    "ModelLookupError",
    "ModelSyntaxError",
    "OutputFormat",
    "RenderError",
    "RewriteDepthExceededError",
    "SourceSpan",
    "UnsupportedRewriteVariantError",
]
