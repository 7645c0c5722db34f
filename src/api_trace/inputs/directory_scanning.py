# --- Directory scanning -----------------------------------------------------
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from api_trace.errors import RootDirectoryError
from api_trace.indexer import CSharpIndexer
from api_trace.models.ast_models import ApiInvocationRecord

logger = logging.getLogger(__name__)


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
        return f.read()


def check_root(root_dir: str):
    """
    Fails fast on a root that cannot be scanned. os.walk() swallows errors on
    the top directory, which would silently produce an empty report.
    """
    if not os.path.isdir(root_dir):
        raise RootDirectoryError(root_dir, "not a directory")
    try:
        os.listdir(root_dir)
    except OSError as e:
        raise RootDirectoryError(root_dir, e.strerror or str(e)) from e


def find_files(root_dir: str, extensions: Iterable[str]) -> list[str]:
    """
    All files under root_dir whose name ends with one of the extensions
    (case-insensitive), sorted by path.
    """
    suffixes = tuple(ext.lower() for ext in extensions)
    found = []
    for dirpath, _, filenames in os.walk(root_dir):
        for fn in filenames:
            if fn.lower().endswith(suffixes):
                found.append(os.path.join(dirpath, fn))
    return sorted(found)


def index_file(indexer: CSharpIndexer, path: str) -> list[ApiInvocationRecord]:
    """
    Indexes one file. A file that cannot be read or parsed contributes
    nothing to this run.
    """
    try:
        src = read_text(path)
        return indexer.index_source(src, path)
    except Exception as e:
        logger.warning("Failed to index %s: %s", path, e)
        return []


def index_files(indexer: CSharpIndexer, paths: list[str],
                max_workers: Optional[int] = None) -> list[ApiInvocationRecord]:
    """
    Indexes files in parallel, one task per file. Returns once every file has
    been processed, so the indexer's graph is complete when this returns.
    """
    records: list[ApiInvocationRecord] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="index") as pool:
        for file_records in pool.map(lambda p: index_file(indexer, p), paths):
            records.extend(file_records)
    return records
