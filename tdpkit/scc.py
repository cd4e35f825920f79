"""Strongly connected components of a directed graph (Tarjan's algorithm).

The components form a DAG, which is reported in topological order:
every component comes after the components it depends on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar

from tdpkit import debug

N = TypeVar("N", bound=Hashable)

Graph = Callable[[N], Iterable[N]]


class Component(Generic[N]):
    """A strongly connected component."""

    __slots__ = ("_dag", "_members", "_deps", "_index")

    def __init__(self, dag: DAG[N], members: List[N], deps: List[int], index: int) -> None:
        self._dag = dag
        self._members = members
        self._deps = deps
        self._index = index

    def members(self) -> List[N]:
        """Return the nodes in this component."""
        return list(self._members)

    def deps(self) -> Iterator[Component[N]]:
        """Yield the components this component directly depends on."""
        for i in self._deps:
            yield self._dag._components[i]

    def index(self) -> int:
        """Return this component's position in topological order."""
        return self._index

    def __repr__(self) -> str:
        return f"Component(index={self._index}, members={self._members!r})"


class DAG(Generic[N]):
    """The DAG of strongly connected components of a directed graph."""

    def __init__(self) -> None:
        self._keys: Dict[N, int] = {}
        self._components: List[Component[N]] = []

    def for_node(self, node: N) -> Optional[Component[N]]:
        """Return the component holding ``node``, or None if it is not in the graph."""
        idx = self._keys.get(node)
        return None if idx is None else self._components[idx]

    def topological(self) -> Iterator[Component[N]]:
        """Yield the components in topological order."""
        yield from self._components


@dataclass
class _Meta:
    index: int
    low: int
    offset: int
    on_stack: bool = True


class _Tarjan(Generic[N]):
    def __init__(self, graph: Graph[N], dag: DAG[N]) -> None:
        self._graph = graph
        self._dag = dag
        self._next_index = 0
        self._stack: List[N] = []
        self._meta: Dict[N, _Meta] = {}

    def _enter(self, node: N) -> Iterator[N]:
        meta = _Meta(self._next_index, self._next_index, len(self._stack))
        debug.log(None, "rec", "%s, index: %d", node, meta.index)
        self._meta[node] = meta
        self._next_index += 1
        self._stack.append(node)
        return iter(self._graph(node))

    def run(self, root: N) -> None:
        work = [(root, self._enter(root))]
        while work:
            node, edges = work[-1]
            meta = self._meta[node]
            for dep in edges:
                seen = self._meta.get(dep)
                if seen is None:
                    work.append((dep, self._enter(dep)))
                    break
                if seen.on_stack:
                    meta.low = min(meta.low, seen.index)
            else:
                work.pop()
                if meta.index == meta.low:
                    self._emit(meta.offset)
                if work:
                    parent = self._meta[work[-1][0]]
                    parent.low = min(parent.low, meta.low)

    def _emit(self, offset: int) -> None:
        members = self._stack[offset:]
        del self._stack[offset:]
        dag = self._dag
        position = len(dag._components)

        for node in members:
            self._meta[node].on_stack = False
            dag._keys[node] = position

        deps = set()
        for node in members:
            for dep in self._graph(node):
                n = dag._keys.get(dep)
                if n is not None and n < position:
                    deps.add(n)

        component = Component(dag, members, sorted(deps), position)
        debug.log(None, "scc", "%s deps %s", members, component._deps)
        dag._components.append(component)


def sort(root: N, graph: Graph[N]) -> DAG[N]:
    """Compute the component DAG of the part of ``graph`` reachable from ``root``."""
    dag: DAG[N] = DAG()
    _Tarjan(graph, dag).run(root)
    return dag