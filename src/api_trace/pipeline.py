"""
Two-phase trace: parallel extraction over every source file, then
resolution of each API call against the completed caller graph.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from api_trace.caller_graph import CallerGraph
from api_trace.config import TraceConfig
from api_trace.indexer import CSharpIndexer
from api_trace.inputs.directory_scanning import check_root, find_files, index_files
from api_trace.inputs.markup import MarkupIndex
from api_trace.models.ast_models import ApiInvocationRecord
from api_trace.resolver import resolve_top_level

logger = logging.getLogger(__name__)


@dataclass
class TraceResult:
    root: str
    records: list[ApiInvocationRecord]
    graph: CallerGraph
    source_files: list[str] = field(default_factory=list)
    markup_files: list[str] = field(default_factory=list)


def extract(indexer: CSharpIndexer, source_files: list[str],
            max_workers: Optional[int] = None) -> list[ApiInvocationRecord]:
    """
    Phase 1. Returns only after every file is indexed, then freezes the
    graph so nothing can write to it during resolution.
    """
    records = index_files(indexer, source_files, max_workers)
    indexer.graph.freeze()
    records.sort(key=lambda r: r.sort_key)
    logger.info(
        "Found %d API calls; caller graph has %d callees and %d edges",
        len(records), len(indexer.graph), indexer.graph.edge_count(),
    )
    return records


def resolve(records: list[ApiInvocationRecord], graph: CallerGraph,
            markup: MarkupIndex, config: TraceConfig):
    """
    Phase 2. Fills in top_level_method and ui_binding on each record.
    """
    for record in records:
        record.top_level_method = resolve_top_level(
            record.immediate_method, graph, config.code_behind_suffix,
        )
        record.ui_binding = markup.find_binding(record.top_level_method.name)


def run_trace(root: str, config: Optional[TraceConfig] = None) -> TraceResult:
    """
    Traces every API call under `root`. Raises RootDirectoryError if the root
    cannot be scanned; problems with individual files are logged and skipped.
    """
    config = config or TraceConfig()
    check_root(root)

    source_files = find_files(root, config.source_extensions)
    markup_files = find_files(root, config.markup_extensions)
    logger.info("Scanning %s: %d source files, %d markup files",
                root, len(source_files), len(markup_files))

    indexer = CSharpIndexer(CallerGraph(), config.api_methods)
    records = extract(indexer, source_files, config.max_workers)

    markup = MarkupIndex.from_paths(markup_files, config.event_attributes)
    resolve(records, indexer.graph, markup, config)

    return TraceResult(
        root=root,
        records=records,
        graph=indexer.graph,
        source_files=source_files,
        markup_files=markup_files,
    )
