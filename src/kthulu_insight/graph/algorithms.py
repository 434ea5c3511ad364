"""Graph algorithms: topological levels, cycle enumeration, SCC, layering."""

from __future__ import annotations

from typing import Iterator, Mapping, Sequence

from .models import DependencyGraph, LayerViolation

_WHITE, _GREY, _BLACK = 0, 1, 2


def compute_levels(adjacency: Mapping[str, Sequence[str]]) -> dict[str, int]:
    """level(n) = 1 + max(level(m)) over edges n -> m; leaves are 0.

    Memoized iterative DFS. Edges back to a node still on the DFS stack
    (cycles) are ignored, so every node gets a finite level.
    """
    state: dict[str, int] = {node: _WHITE for node in adjacency}
    levels: dict[str, int] = {}

    for root in sorted(adjacency):
        if state[root] != _WHITE:
            continue
        state[root] = _GREY
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(sorted(adjacency[root])))]

        while stack:
            node, it = stack[-1]
            descended = False
            for neighbor in it:
                if state.get(neighbor, _BLACK) == _WHITE:
                    state[neighbor] = _GREY
                    stack.append((neighbor, iter(sorted(adjacency[neighbor]))))
                    descended = True
                    break
            if descended:
                continue

            stack.pop()
            state[node] = _BLACK
            child_levels = [levels[m] for m in adjacency[node] if m in levels]
            levels[node] = 1 + max(child_levels) if child_levels else 0

    return levels


def canonicalize_cycle(cycle: Sequence[str]) -> list[str]:
    """Rotate a cycle so its lexicographically smallest id comes first."""
    if not cycle:
        return []
    start = min(range(len(cycle)), key=lambda i: cycle[i])
    return list(cycle[start:]) + list(cycle[:start])


def find_cycles(adjacency: Mapping[str, Sequence[str]]) -> list[list[str]]:
    """Three-color DFS cycle enumeration.

    Every back edge to a grey node yields the grey-stack suffix from that
    node to the current one. Cycles are canonicalized and deduplicated, and
    returned in discovery order (roots and neighbours visited sorted).
    """
    state: dict[str, int] = {node: _WHITE for node in adjacency}
    seen: set[tuple[str, ...]] = set()
    cycles: list[list[str]] = []

    for root in sorted(adjacency):
        if state[root] != _WHITE:
            continue
        state[root] = _GREY
        path: list[str] = [root]
        position: dict[str, int] = {root: 0}
        stack: list[Iterator[str]] = [iter(sorted(adjacency[root]))]

        while stack:
            descended = False
            for neighbor in stack[-1]:
                color = state.get(neighbor, _BLACK)
                if color == _GREY:
                    cycle = canonicalize_cycle(path[position[neighbor] :])
                    key = tuple(cycle)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(cycle)
                elif color == _WHITE:
                    state[neighbor] = _GREY
                    position[neighbor] = len(path)
                    path.append(neighbor)
                    stack.append(iter(sorted(adjacency[neighbor])))
                    descended = True
                    break
            if descended:
                continue

            stack.pop()
            done = path.pop()
            del position[done]
            state[done] = _BLACK

    return cycles


def cyclic_components(adjacency: Mapping[str, Sequence[str]]) -> list[list[str]]:
    """Groups of two or more modules that can all reach one another.

    Kosaraju's two passes: a DFS over the dependency edges records finish
    order, then a walk over the reversed edges, taken in reverse finish
    order, peels off one strongly connected component per start node.
    Each group is sorted and the groups are returned sorted.
    """
    nodes = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    finished: list[str] = []
    seen: set[str] = set()
    for root in sorted(nodes):
        if root in seen:
            continue
        seen.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(adjacency.get(root, ())))]
        while stack:
            node, it = stack[-1]
            for neighbor in it:
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append((neighbor, iter(adjacency.get(neighbor, ()))))
                    break
            else:
                stack.pop()
                finished.append(node)

    dependents: dict[str, list[str]] = {node: [] for node in nodes}
    for source, targets in adjacency.items():
        for target in targets:
            dependents[target].append(source)

    assigned: set[str] = set()
    groups: list[list[str]] = []
    for start in reversed(finished):
        if start in assigned:
            continue
        assigned.add(start)
        group = [start]
        pending = [start]
        while pending:
            for source in dependents[pending.pop()]:
                if source not in assigned:
                    assigned.add(source)
                    group.append(source)
                    pending.append(source)
        if len(group) > 1:
            groups.append(sorted(group))
    return sorted(groups)


def analyze_graph(graph: DependencyGraph, detect_cycles: bool = True) -> DependencyGraph:
    """Fill levels, cycles and multi-node SCCs on ``graph`` in place."""
    adjacency = graph.adjacency
    graph.levels = compute_levels(adjacency)
    if detect_cycles:
        graph.cycles = find_cycles(adjacency)
        graph.components = cyclic_components(adjacency)
    else:
        graph.cycles = []
        graph.components = []
    return graph


def check_layers(
    graph: DependencyGraph, layer_of: Mapping[str, str], order: Sequence[str]
) -> list[LayerViolation]:
    """Edges from an inner layer to an outer one.

    ``order`` lists layers outermost first; nodes without a layer are skipped.
    """
    rank = {name: i for i, name in enumerate(order)}
    violations = []
    for edge in sorted(graph.edges, key=lambda e: e.key):
        src_layer = layer_of.get(edge.source)
        dst_layer = layer_of.get(edge.target)
        if src_layer not in rank or dst_layer not in rank:
            continue
        if rank[dst_layer] < rank[src_layer]:
            violations.append(LayerViolation(edge.source, src_layer, edge.target, dst_layer))
    return violations
