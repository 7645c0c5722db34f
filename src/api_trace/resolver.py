import logging

from api_trace.caller_graph import CallerGraph
from api_trace.config import CODE_BEHIND_SUFFIX
from api_trace.models.ast_models import MethodIdentity

logger = logging.getLogger(__name__)


def _candidate_order(method: MethodIdentity) -> tuple[str, str]:
    return (method.file_path, method.name)


def choose_caller(current: MethodIdentity, callers,
                  code_behind_suffix: str = CODE_BEHIND_SUFFIX) -> MethodIdentity:
    """
    Picks the caller to ascend to from `current`.

    Callers in another file win over same-file ones (those are usually local
    helpers). Among the remaining candidates a code-behind file wins,
    otherwise the first in (file, name) order.
    """
    candidates = [c for c in callers if c.file_path != current.file_path]
    if not candidates:
        candidates = list(callers)
    candidates.sort(key=_candidate_order)

    suffix = code_behind_suffix.lower()
    for candidate in candidates:
        if candidate.file_path.lower().endswith(suffix):
            return candidate
    return candidates[0]


def resolve_top_level(start: MethodIdentity, graph: CallerGraph,
                      code_behind_suffix: str = CODE_BEHIND_SUFFIX) -> MethodIdentity:
    """
    Walks up the caller graph from `start` to the outermost method.

    Follows a single path. Stops when a method has no known callers, or when
    the walk comes back to a method already on the path (mutual recursion);
    in that case the revisited method is returned.
    """
    visited: set[MethodIdentity] = set()
    current = start
    while current not in visited:
        visited.add(current)
        callers = graph.callers_of(current.name)
        if not callers:
            return current
        current = choose_caller(current, callers, code_behind_suffix)

    logger.debug("Cycle while ascending from %s; stopping at %s", start, current)
    return current
