"""
Contamination tracing over resource transitions.
==================================================
Within each session, consecutive events link the earlier event's target
resource to the later one's (self-loops allowed). An absent target on either
side of a pair gives no edge. The resulting directed graph is built fresh for
every call; a resource is a node only if some edge touches it.

trace_contamination() returns one shortest chain (by edge count) from a
start resource to a target resource, found by breadth-first search.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence

import networkx as nx
import pandas as pd

from .records import LogRecord, records_to_frame

logger = logging.getLogger("forensic_audit.graph")

TRANSITION_COLUMNS = ["session_id", "position", "resource", "next_resource"]


def resource_transitions(records: Sequence[LogRecord]) -> pd.DataFrame:
    """
    Same-session consecutive resource transitions, one row per event pair.

    Rows are ordered by session (first appearance in the log), then by the
    position of the earlier event within the session.
    """
    df = records_to_frame(records)
    if df.empty:
        return pd.DataFrame(columns=TRANSITION_COLUMNS)

    df["_session_order"] = pd.factorize(df["session_id"])[0]
    out = df.sort_values(["_session_order", "position"], kind="stable").copy()
    out["resource"] = out["target_resource"]
    out["next_resource"] = out.groupby("session_id", sort=False)["target_resource"].shift(-1)

    trans = out.dropna(subset=["resource", "next_resource"])
    return trans[TRANSITION_COLUMNS].reset_index(drop=True)


def transitions_to_graph(trans: pd.DataFrame) -> nx.DiGraph:
    """
    Directed resource graph from a resource_transitions() table.
    Edge weight = number of observed transitions. Successors keep the order
    in which each edge was first observed.
    """
    G = nx.DiGraph()
    if trans.empty:
        return G

    agg = (
        trans.groupby(["resource", "next_resource"], sort=False)
        .size()
        .reset_index(name="count")
    )
    for _, row in agg.iterrows():
        G.add_edge(row["resource"], row["next_resource"], weight=int(row["count"]))
    return G


def build_contamination_graph(records: Sequence[LogRecord]) -> nx.DiGraph:
    return transitions_to_graph(resource_transitions(records))


def shortest_contamination_path(G: nx.DiGraph, start: str, target: str) -> Optional[List[str]]:
    """BFS from start; first discovery of target gives a minimum-edge path."""
    if start == target and start in G:
        return [start]
    if start not in G or target not in G:
        logger.warning(
            "Trace endpoint missing from graph (start=%r present=%s, target=%r present=%s)",
            start, start in G, target, target in G,
        )
        return None

    pred: Dict[str, str] = {}
    visited = {start}
    queue = deque([start])
    found = False
    while queue:
        node = queue.popleft()
        if node == target:
            found = True
            break
        for nxt in G.successors(node):
            if nxt not in visited:
                visited.add(nxt)
                pred[nxt] = node
                queue.append(nxt)

    if not found:
        return None

    path = [target]
    while path[-1] in pred:
        path.append(pred[path[-1]])
    path.reverse()
    if path[0] != start:
        logger.error("Inconsistent predecessor chain for %r -> %r", start, target)
        return None
    return path


def trace_contamination(
    records: Sequence[LogRecord],
    start: str,
    target: str,
) -> Optional[List[str]]:
    """
    Shortest chain of resources from start to target, or None if unreachable.
    start == target returns [start] when the resource is in the graph.
    """
    G = build_contamination_graph(records)
    logger.debug("Contamination graph: %d nodes, %d edges", G.number_of_nodes(), G.number_of_edges())
    return shortest_contamination_path(G, start, target)
