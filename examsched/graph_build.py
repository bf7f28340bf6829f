from itertools import combinations
from typing import Dict, List, Set

import networkx as nx

from .models import Course, Student


def build_conflict_graph(courses: List[Course]) -> nx.Graph:
    """One node per course code, an edge wherever two courses share a student.

    Edge attribute ``weight`` is the number of shared students.
    """
    G = nx.Graph()
    courses_of: Dict[Student, Set[str]] = {}
    for c in courses:
        if c is None:
            continue
        G.add_node(c.code, students=c.student_count)
        for st in c.enrolled_students:
            courses_of.setdefault(st, set()).add(c.code)
    for codes in courses_of.values():
        for u, v in combinations(sorted(codes), 2):
            if G.has_edge(u, v):
                G[u][v]["weight"] += 1
            else:
                G.add_edge(u, v, weight=1)
    return G
