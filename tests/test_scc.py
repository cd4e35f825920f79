import math

import pytest

from tdpkit import scc


def parse_graph(text):
    matrix = [ch == "#" for ch in text if ch in ".#"]
    nodes = math.isqrt(len(matrix))
    if nodes * nodes != len(matrix):
        raise ValueError("invalid graph string")

    def deps(n):
        for m in range(nodes):
            if matrix[n * nodes + m]:
                yield m

    return deps


CASES = [
    ("singleton", ".", [[0]], [[]]),
    ("loop", "#", [[0]], [[]]),
    (
        "tree",
        """.##..
        .....
        ...##
        .....
        .....""",
        [[1], [3], [4], [2], [0]],
        [[], [], [], [1, 2], [0, 3]],
    ),
    (
        "cycle",
        """.#...
        ..#..
        ...#.
        ....#
        #....""",
        [[0, 1, 2, 3, 4]],
        [[]],
    ),
    (
        "two-cycles",
        """.#...
        #..#.
        ....#
        ..#..
        ...#.""",
        [[2, 3, 4], [0, 1]],
        [[], [0]],
    ),
    (
        "dumbbell",
        """.#...
        #.#..
        ..#.#
        ....#
        ...#.""",
        [[3, 4], [2], [0, 1]],
        [[], [0], [1]],
    ),
    (
        "cycle-tree",
        """01234567
        .#...... 0
        #.#.#... 1
        ...#.... 2
        ..#...#. 3
        .....#.. 4
        ....#... 5
        .......# 6
        ......#. 7""",
        [[6, 7], [2, 3], [4, 5], [0, 1]],
        [[], [0], [], [1, 2]],
    ),
]


@pytest.mark.parametrize("name, graph, want, want_deps", CASES, ids=[c[0] for c in CASES])
def test_sort(name, graph, want, want_deps):
    dag = scc.sort(0, parse_graph(graph))

    got = []
    got_deps = []
    for component in dag.topological():
        got.append(sorted(component.members()))
        got_deps.append(sorted(dep.index() for dep in component.deps()))

    assert got == want
    assert got_deps == want_deps


TREE = CASES[2][1]


def test_for_node():
    dag = scc.sort(0, parse_graph(TREE))
    assert dag.for_node(2).members() == [2]
    assert dag.for_node(0).index() == 4
    assert dag.for_node(99) is None


def test_unreachable_nodes_are_absent():
    dag = scc.sort(2, parse_graph(TREE))
    assert [c.members() for c in dag.topological()] == [[3], [4], [2]]
    assert dag.for_node(0) is None


def test_indices_follow_topological_order():
    dag = scc.sort(0, parse_graph(CASES[-1][1]))
    components = list(dag.topological())
    assert [c.index() for c in components] == list(range(len(components)))
    for component in components:
        assert all(dep.index() < component.index() for dep in component.deps())


def test_members_copy_is_independent():
    dag = scc.sort(0, parse_graph(CASES[3][1]))
    component = dag.for_node(0)
    component.members().append(42)
    assert sorted(component.members()) == [0, 1, 2, 3, 4]


def test_string_nodes():
    edges = {"a": ["b"], "b": ["a", "c"], "c": []}
    dag = scc.sort("a", lambda n: edges[n])
    assert [sorted(c.members()) for c in dag.topological()] == [["c"], ["a", "b"]]
    assert [d.members() for d in dag.for_node("a").deps()] == [["c"]]


def test_deep_chain_does_not_overflow():
    depth = 5000
    dag = scc.sort(0, lambda n: [n + 1] if n < depth else [])
    components = list(dag.topological())
    assert len(components) == depth + 1
    assert components[0].members() == [depth]
    assert components[-1].members() == [0]