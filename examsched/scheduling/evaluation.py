from typing import List, Optional

import networkx as nx

from ..conflicts import Conflict, ConflictType, conflict_counts
from ..models import Calendar


def greedy_clique_lb(G: nx.Graph) -> int:
    """Size of a greedily grown clique: the fewest disjoint exam times needed."""
    if G.number_of_nodes() == 0:
        return 0
    order = sorted(G.nodes(), key=lambda u: (-G.degree(u), str(u)))
    clique = [order[0]]
    for v in order[1:]:
        if all(G.has_edge(v, w) for w in clique):
            clique.append(v)
    return len(clique)


def summary(calendar: Calendar, conflicts: List[Conflict], G: Optional[nx.Graph] = None) -> str:
    sessions = calendar.sessions if calendar else ()
    days = sorted({s.start.date() for s in sessions if s.start is not None})
    rooms = {r.classroom_id for s in sessions for r in s.rooms}
    seated = sum(s.total_student_count for s in sessions)
    counts = conflict_counts(conflicts)

    lines = [
        f"Sessions: {len(sessions)}  Seats used: {seated}",
        f"Days used: {len(days)}" + (f" ({days[0]} .. {days[-1]})" if days else ""),
        f"Rooms used: {len(rooms)}",
        f"Conflicts: {len(conflicts)}",
    ]
    for t in ConflictType:
        if t in counts:
            lines.append(f"  - {t.value}: {counts[t]}")
    if G is not None:
        lines.append(f"Conflict graph: nodes={G.number_of_nodes()}  edges={G.number_of_edges()}")
        lines.append(f"Clique lower bound: {greedy_clique_lb(G)}")
    return "\n".join(lines) + "\n"
