"""Dependency graph construction and initiative processing order."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Sequence, Set

from roadmap.domain.models import Initiative
from roadmap.services.timeplan import as_date

DependencyGraph = Dict[str, List[str]]  # dependent id -> dependency ids


def build_dependency_graph(dependencies: Iterable) -> DependencyGraph:
    """Map each dependent initiative to the initiatives it waits on."""
    graph: DependencyGraph = {}
    for edge in dependencies:
        graph.setdefault(edge.dependent_id, []).append(edge.dependency_id)
    return graph


def urgency_key(initiative: Initiative):
    """Deadline ascending (no deadline last), then priority descending."""
    deadline = as_date(initiative.deadline)
    return (deadline is None, deadline or date.min, -(initiative.priority or 0))


def order_initiatives(initiatives: Sequence[Initiative], graph: DependencyGraph) -> List[Initiative]:
    """
    Order initiatives so dependencies come before their dependents.

    Initiatives are visited by urgency; each visit places its dependencies
    first (depth-first). A visited set stops revisits, so cycles are tolerated
    and their members fall out in visitation order.
    """
    by_id = {initiative.id: initiative for initiative in initiatives}
    visited: Set[str] = set()
    ordered: List[Initiative] = []

    def visit(initiative_id: str) -> None:
        if initiative_id in visited:
            return
        visited.add(initiative_id)
        for dependency_id in graph.get(initiative_id, []):
            visit(dependency_id)
        initiative = by_id.get(initiative_id)
        if initiative is not None:
            ordered.append(initiative)

    for initiative in sorted(initiatives, key=urgency_key):
        visit(initiative.id)

    return ordered


def find_dependency_cycles(dependencies: Iterable) -> List[List[str]]:
    """
    Report groups of initiatives that depend on each other, directly or transitively.

    Each group is a strongly connected component with more than one member,
    or a single initiative depending on itself, as a sorted id list. Used for
    diagnostics only; scheduling order is unaffected.
    """
    graph = build_dependency_graph(dependencies)
    nodes = sorted(set(graph) | {dep for deps in graph.values() for dep in deps})

    index: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    stack: List[str] = []
    on_stack: Set[str] = set()
    groups: List[List[str]] = []

    def connect(node: str) -> None:
        index[node] = lowlink[node] = len(index)
        stack.append(node)
        on_stack.add(node)
        for nxt in graph.get(node, []):
            if nxt not in index:
                connect(nxt)
                lowlink[node] = min(lowlink[node], lowlink[nxt])
            elif nxt in on_stack:
                lowlink[node] = min(lowlink[node], index[nxt])

        if lowlink[node] == index[node]:
            group = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                group.append(member)
                if member == node:
                    break
            if len(group) > 1 or node in graph.get(node, []):
                groups.append(sorted(group))

    for node in nodes:
        if node not in index:
            connect(node)
    return sorted(groups)


def cycle_members(dependencies: Iterable) -> Set[str]:
    return {node for cycle in find_dependency_cycles(dependencies) for node in cycle}
