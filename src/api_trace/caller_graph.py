import threading
from collections import defaultdict

from api_trace.errors import GraphFrozenError
from api_trace.models.ast_models import MethodIdentity


class CallerGraph:
    """
    Callee name -> set of methods seen calling it, for the whole project.

    Keys are bare method names because a syntactic call site cannot tell which
    overload (or which class) it targets; callers are full MethodIdentity
    values. Extraction workers add edges concurrently; once extraction is done
    the graph is frozen and only read.
    """

    def __init__(self):
        self._callers: defaultdict[str, set[MethodIdentity]] = defaultdict(set)
        self._lock = threading.Lock()
        self._frozen = False

    def add_edge(self, callee_name: str, caller: MethodIdentity):
        with self._lock:
            if self._frozen:
                raise GraphFrozenError(
                    f"Cannot add edge {caller} -> {callee_name}: graph is frozen"
                )
            self._callers[callee_name].add(caller)

    def callers_of(self, callee_name: str) -> frozenset[MethodIdentity]:
        with self._lock:
            callers = self._callers.get(callee_name)
            return frozenset(callers) if callers else frozenset()

    def freeze(self):
        """Ends the accumulation phase. Later add_edge calls raise."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def callee_names(self) -> list[str]:
        with self._lock:
            return sorted(self._callers)

    def edge_count(self) -> int:
        with self._lock:
            return sum(len(c) for c in self._callers.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._callers)

    def __contains__(self, callee_name: str) -> bool:
        with self._lock:
            return callee_name in self._callers
