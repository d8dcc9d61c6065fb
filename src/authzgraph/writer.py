"""One-call pipeline: model source → DOT text plus cycle report.

    source -> AuthorizationModel -> RelationGraph -+-> classify -> CycleReport
                                                   +-> prune -> render -> DOT

Any failure aborts the whole call; no partial result is returned.

Python 3.13+.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath

from authzgraph.analysis.cycles import CycleReport, classify
from authzgraph.config import WriterConfig
from authzgraph.enums import ModelFormat
from authzgraph.graph.builder import GraphBuilder
from authzgraph.graph.dot import DotRenderer
from authzgraph.graph.multigraph import RelationGraph
from authzgraph.model.ast import AuthorizationModel
from authzgraph.model.loader import load_model
from authzgraph.model.parser import ModelParser

__all__ = ["WriterResult", "load_source", "resolve_format", "write", "write_source"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WriterResult:
    """Rendered graph and its cycle analysis.

    Attributes:
        dot: DOT text of the (optionally pruned) graph
        cycles: Cycle report of the built graph
        graph: The graph that was rendered
    """

    dot: str
    cycles: CycleReport
    graph: RelationGraph


def resolve_format(
    requested: ModelFormat, *, path: PurePath | None = None, source: str = ""
) -> ModelFormat:
    """Pick DSL or JSON for AUTO.

    A `.json` extension selects JSON. Without a path, source text whose
    first non-blank character is `{` is treated as JSON.
    """
    if requested is not ModelFormat.AUTO:
        return requested
    if path is not None:
        return ModelFormat.JSON if path.suffix.lower() == ".json" else ModelFormat.DSL
    return ModelFormat.JSON if source.lstrip().startswith("{") else ModelFormat.DSL


def load_source(
    source: str,
    model_format: ModelFormat = ModelFormat.AUTO,
    config: WriterConfig | None = None,
) -> AuthorizationModel:
    """Parse DSL or load JSON model source.

    Raises:
        ModelSyntaxError: If the source cannot be read as a model
        RewriteDepthExceededError: If a rewrite nests deeper than config.max_depth
        UnsupportedRewriteVariantError: If a JSON rewrite uses an unknown key
    """
    config = config or WriterConfig()
    match resolve_format(model_format, source=source):
        case ModelFormat.JSON:
            return load_model(
                source, max_source_size=config.max_source_size, max_depth=config.max_depth
            )
        case _:
            parser = ModelParser(
                max_depth=config.max_depth, max_source_size=config.max_source_size
            )
            return parser.parse(source)


def write(model: AuthorizationModel, config: WriterConfig | None = None) -> WriterResult:
    """Build, analyze and render one model.

    Cycles are classified on the full graph; pruning only affects what
    is rendered.

    Raises:
        ModelError: If the graph cannot be built
        RenderError: If the graph cannot be rendered
    """
    config = config or WriterConfig()
    graph = GraphBuilder(max_depth=config.max_depth).build(model)
    report = classify(graph)
    rendered = graph.without_isolated_nodes() if config.prune else graph
    dot = DotRenderer(config.rankdir).render(rendered)

    if report.has_definitive_cycles:
        logger.debug("Model has %d definitive cycle(s)", report.definitive_count)
    return WriterResult(dot=dot, cycles=report, graph=rendered)


def write_source(
    source: str,
    model_format: ModelFormat = ModelFormat.AUTO,
    config: WriterConfig | None = None,
) -> WriterResult:
    """Parse model source, then write() it."""
    return write(load_source(source, model_format, config), config)
