"""
Visualization utilities.
==========================
Static matplotlib exports for batch reports.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import networkx as nx
import pandas as pd


def plot_transfer_profile(
    frame: pd.DataFrame,
    spikes: pd.DataFrame,
    out_dir: Path,
    dpi: int = 160,
) -> Path:
    """Bytes transferred per event in log order; spike targets marked in red."""
    path = out_dir / "transfer_profile.png"
    fig, ax = plt.subplots(figsize=(12, 5))
    ax.plot(frame["position"], frame["bytes_transferred"], marker=".", linewidth=1)
    if not spikes.empty:
        hit = frame[frame["position"].isin(spikes["spike_position"].unique())]
        ax.scatter(hit["position"], hit["bytes_transferred"], color="#d62728", zorder=3,
                   label="next-greater transfer")
        ax.legend()
    ax.set_title("Bytes Transferred by Event (log order)")
    ax.set_xlabel("Event position")
    ax.set_ylabel("Bytes transferred")
    plt.tight_layout()
    plt.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def plot_contamination_graph(
    G: nx.DiGraph,
    out_dir: Path,
    path: Optional[Sequence[str]] = None,
    dpi: int = 160,
    max_nodes: int = 200,
) -> Optional[Path]:
    """
    Draw the resource transition graph, highlighting a traced path if given.
    Returns None (nothing written) for an empty or oversized graph.
    """
    if len(G) == 0 or len(G) > max_nodes:
        return None

    out = out_dir / "contamination_graph.png"
    pos = nx.spring_layout(G, seed=42)
    fig, ax = plt.subplots(figsize=(10, 8))

    on_path = set(path or [])
    path_edges = set(zip(path[:-1], path[1:])) if path else set()
    node_colors = ["#d62728" if n in on_path else "#1f77b4" for n in G.nodes()]
    edge_colors = ["#d62728" if e in path_edges else "#999999" for e in G.edges()]

    nx.draw_networkx(
        G, pos, ax=ax,
        node_color=node_colors, edge_color=edge_colors,
        node_size=400, font_size=8, arrows=True,
    )
    ax.set_title("Resource Transitions (red = traced contamination path)")
    ax.axis("off")
    plt.tight_layout()
    plt.savefig(out, dpi=dpi)
    plt.close(fig)
    return out
