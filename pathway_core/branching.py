from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from .types import ConfigSnapshot
from .engine import in_scope


log = logging.getLogger(__name__)


@dataclass
class BranchingReport:
    cycles: List[List[str]] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)
    reachable: List[str] = field(default_factory=list)
    end_reachable: bool = False

    @property
    def publish_safe(self) -> bool:
        return not self.cycles and not self.orphans and self.end_reachable

    def to_dict(self) -> Dict[str, object]:
        return {
            "cycles": [list(c) for c in self.cycles],
            "orphans": list(self.orphans),
            "reachable": list(self.reachable),
            "endReachable": self.end_reachable,
        }


def build_edges(snapshot: ConfigSnapshot, mode: str, track: Optional[str] = None) -> Dict[str, List[str]]:
    """Adjacency of active in-scope questions; edges leaving the partition are dropped."""

    ids = [q.id for q in snapshot.questions if q.status == "active" and in_scope(q, mode, track)]
    members = set(ids)
    edges: Dict[str, List[str]] = {qid: [] for qid in ids}
    for opt in snapshot.options:
        if opt.question_id in edges and opt.next_question_id in members:
            edges[opt.question_id].append(opt.next_question_id)
    return edges


def _roots(snapshot: ConfigSnapshot, edges: Dict[str, List[str]]) -> List[str]:
    return [q.id for q in snapshot.questions if q.id in edges and not q.parent_question_id]


def _search(edges: Dict[str, List[str]], roots: List[str]) -> tuple[List[str], List[List[str]]]:
    # depth-first with an explicit frame stack; on_path holds the active branch
    seen: Dict[str, None] = {}
    on_path: set[str] = set()
    cycles: List[List[str]] = []
    frames: list = []

    def enter(node: str, path: List[str]) -> None:
        if node in on_path:
            cycles.append(path[path.index(node):])
            return
        if node in seen:
            return
        seen[node] = None
        on_path.add(node)
        frames.append((node, path, iter(edges.get(node, ()))))

    for root in roots:
        enter(root, [root])
        while frames:
            node, path, pending = frames[-1]
            nxt = next(pending, None)
            if nxt is None:
                frames.pop()
                on_path.discard(node)
                continue
            enter(nxt, path + [nxt])

    return list(seen), cycles


def _reaches_end(edges: Dict[str, List[str]], root: str) -> bool:
    visited = {root}
    todo = [root]
    while todo:
        node = todo.pop()
        children = edges.get(node, [])
        if not children:
            return True
        for child in children:
            if child not in visited:
                visited.add(child)
                todo.append(child)
    return False


def validate_branching(snapshot: ConfigSnapshot, mode: str, track: Optional[str] = None) -> BranchingReport:
    edges = build_edges(snapshot, mode, track)
    roots = _roots(snapshot, edges)
    reachable, cycles = _search(edges, roots)
    visited = set(reachable)
    orphans = [qid for qid in edges if qid not in visited]
    end_reachable = any(_reaches_end(edges, r) for r in roots)
    log.debug(
        "branching mode=%s track=%s questions=%d roots=%d cycles=%d orphans=%d end=%s",
        mode, track, len(edges), len(roots), len(cycles), len(orphans), end_reachable,
    )
    return BranchingReport(cycles=cycles, orphans=orphans, reachable=reachable, end_reachable=end_reachable)
