# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory prerequisite graph.

PrerequisiteGraph is a snapshot of the prerequisite edges of a tenant,
keyed by subject ID. PrerequisiteService loads it once per operation and
answers cycle and chain questions from it without further queries.

All walks use an explicit worklist and a visited set, so they terminate
even if the stored data already contains a cycle.

Example:
    >>> graph = PrerequisiteGraph()
    >>> graph.add("cs201", "cs101", edge_id="e1")
    >>> graph.would_create_cycle("cs101", "cs201")
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ChainLink:
    """Direct prerequisite of a subject inside a chain.

    Attributes:
        edge_id: ID of the stored prerequisite edge.
        prerequisite_id: The prerequisite subject.
        level: Depth from the chain root along the first discovery path.
    """

    edge_id: str
    prerequisite_id: str
    level: int


class PrerequisiteGraph:
    """Directed graph of "subject requires prerequisite" edges."""

    def __init__(self) -> None:
        # subject_id -> {prerequisite_id: edge_id}
        self._edges: dict[str, dict[str, str]] = {}

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[str, str, str]]) -> PrerequisiteGraph:
        """Build a graph from (edge_id, subject_id, prerequisite_id) rows."""
        graph = cls()
        for edge_id, subject_id, prerequisite_id in edges:
            graph.add(subject_id, prerequisite_id, edge_id)
        return graph

    def add(self, subject_id: str, prerequisite_id: str, edge_id: str) -> None:
        """Record an edge. Validation is the caller's job."""
        self._edges.setdefault(subject_id, {})[prerequisite_id] = edge_id

    def remove(self, subject_id: str, prerequisite_id: str) -> None:
        """Forget an edge if present."""
        targets = self._edges.get(subject_id)
        if targets is None:
            return
        targets.pop(prerequisite_id, None)
        if not targets:
            del self._edges[subject_id]

    def has_edge(self, subject_id: str, prerequisite_id: str) -> bool:
        return prerequisite_id in self._edges.get(subject_id, {})

    def closure(self, subject_id: str) -> set[str]:
        """All subjects reachable from subject_id by following edges.

        The start subject is only included when it lies on a cycle.
        """
        reachable: set[str] = set()
        visited = {subject_id}
        worklist = [subject_id]

        while worklist:
            current = worklist.pop()
            for prerequisite_id in self._edges.get(current, {}):
                reachable.add(prerequisite_id)
                if prerequisite_id not in visited:
                    visited.add(prerequisite_id)
                    worklist.append(prerequisite_id)

        return reachable

    def depends_on(self, subject_id: str, target_id: str) -> bool:
        """Whether target_id is a direct or indirect prerequisite of subject_id."""
        return target_id in self.closure(subject_id)

    def would_create_cycle(self, subject_id: str, prerequisite_id: str) -> bool:
        """Whether adding (subject_id, prerequisite_id) would close a cycle.

        True when prerequisite_id already depends, directly or indirectly,
        on subject_id.
        """
        return self.depends_on(prerequisite_id, subject_id)

    def chain(self, subject_id: str) -> dict[str, list[ChainLink]]:
        """Transitive prerequisite chain of a subject.

        Depth-first walk from subject_id. A subject is expanded at most once
        for the whole walk, so a subject reachable through several routes
        carries the level of the route found first, which is not necessarily
        the shortest one. Only subjects with prerequisites appear as keys.

        Args:
            subject_id: Chain root.

        Returns:
            Mapping of each expanded subject to its direct prerequisites,
            in depth-first discovery order.
        """
        chain: dict[str, list[ChainLink]] = {}
        visited: set[str] = set()
        stack: list[tuple[str, int]] = [(subject_id, 0)]

        while stack:
            current, depth = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            targets = self._edges.get(current, {})
            if not targets:
                continue

            links = [
                ChainLink(
                    edge_id=targets[prerequisite_id],
                    prerequisite_id=prerequisite_id,
                    level=depth + 1,
                )
                for prerequisite_id in sorted(targets)
            ]
            chain[current] = links

            # Reversed so the first prerequisite is expanded first
            for link in reversed(links):
                if link.prerequisite_id not in visited:
                    stack.append((link.prerequisite_id, depth + 1))

        return chain
