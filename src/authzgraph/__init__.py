"""authzgraph - authorization model graphs and cycle analysis.

Turns a relationship-based authorization model (types, relations and
their rewrite rules) into a deterministic relation multigraph, renders
it as Graphviz DOT, and classifies every cycle as definitive (the
relations can never resolve) or possible (needs a runtime recursion
guard).

Public API:
    write - Model → DOT text plus CycleReport
    write_source - Model source (DSL or JSON) → DOT text plus CycleReport
    parse_model - DSL source → AuthorizationModel
    load_model - JSON source → AuthorizationModel
    build_graph - AuthorizationModel → RelationGraph
    classify - RelationGraph → CycleReport
    render_dot - RelationGraph → DOT text
    WriterConfig - Pipeline configuration

Exceptions:
    AuthzGraphError - Base exception class
    ModelError - Model cannot be turned into a graph
    ModelLookupError - Unknown type or relation
    ModelSyntaxError - DSL or JSON source errors
    RenderError - Graph cannot be serialized

Submodules:
    authzgraph.model - AST, parser, loader, type system
    authzgraph.graph - Multigraph, builder, DOT renderer
    authzgraph.analysis - Cycle enumeration and classification
    authzgraph.diagnostics - Error types, codes and formatting
"""

from .analysis import Cycle, CycleReport, classify
from .config import WriterConfig
from .diagnostics import (
    AuthzGraphError,
    ModelError,
    ModelLookupError,
    ModelSyntaxError,
    RenderError,
    RewriteDepthExceededError,
    UnsupportedRewriteVariantError,
)
from .enums import CycleKind, ModelFormat
from .graph import RelationGraph, build_graph, render_dot
from .model import AuthorizationModel, load_model, parse_model
from .writer import WriterResult, write, write_source

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("authzgraph")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "AuthorizationModel",
    "AuthzGraphError",
    "Cycle",
    "CycleKind",
    "CycleReport",
    "ModelError",
    "ModelFormat",
    "ModelLookupError",
    "ModelSyntaxError",
    "RelationGraph",
    "RenderError",
    "RewriteDepthExceededError",
    "UnsupportedRewriteVariantError",
    "WriterConfig",
    "WriterResult",
    "__version__",
    "build_graph",
    "classify",
    "load_model",
    "parse_model",
    "render_dot",
    "write",
    "write_source",
]
