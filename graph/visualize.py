from __future__ import annotations

import importlib
import logging
from typing import Dict, List, Tuple

import networkx as nx

logger = logging.getLogger(__name__)

# Rule node type → color map
TYPE_COLORS: Dict[str, str] = {
    "singleBlock": "#90EE90",
    "conditionalBlock": "#87CEEB",
    "conditionalGPTBlock": "#DDA0DD",
    "defaultBlock": "#F0E68C",
    "response": "#FFB6C1",
    "attribute": "#FFA07A",
    "moment": "#B0C4DE",
    "function": "#F5DEB3",
}
OTHER_COLOR = "#D3D3D3"


# pygraphviz first, then pydot; either needs the graphviz binaries
GRAPHVIZ_BACKENDS = ("networkx.drawing.nx_agraph", "networkx.drawing.nx_pydot")


def _try_graphviz_layout(g: nx.DiGraph) -> Dict[str, Tuple[float, float]]:
    for backend in GRAPHVIZ_BACKENDS:
        try:
            return importlib.import_module(backend).graphviz_layout(g, prog="dot")
        except Exception as e:
            logger.debug(f"{backend} layout unavailable: {e}")
    return {}


def _generation_layout(g: nx.DiGraph) -> Dict[str, Tuple[float, float]]:
    # Columns follow topological generations; nodes without connections go
    # in a column of their own ordered by chain index
    if not nx.is_directed_acyclic_graph(g):
        return {}

    columns: List[List[str]] = [sorted(gen, key=lambda n: g.nodes[n].get("index", 0))
                                for gen in nx.topological_generations(g)]
    connected = [col for col in columns if any(g.degree(n) for n in col)]
    loose = [n for col in columns for n in col if g.degree(n) == 0]
    if loose:
        connected.insert(0, sorted(loose, key=lambda n: g.nodes[n].get("index", 0)))

    pos: Dict[str, Tuple[float, float]] = {}
    col_gap = 3.0
    row_gap = 1.5
    for col, nodes in enumerate(connected):
        offset = (len(nodes) - 1) * row_gap / 2.0
        for i, n in enumerate(nodes):
            pos[n] = (col * col_gap, offset - i * row_gap)
    return pos


def _membership_edges(g: nx.DiGraph) -> List[Tuple[str, str]]:
    # container -> member pairs from NodeIdList, skipping pairs already connected
    pairs: List[Tuple[str, str]] = []
    for n, attrs in g.nodes(data=True):
        for member in attrs.get("members") or []:
            if member in g and not g.has_edge(n, member):
                pairs.append((n, member))
    return pairs


def draw_with_legend(g: nx.DiGraph, save_path: str) -> bool:
    """Render a chain graph to ``save_path``; returns False when matplotlib is unavailable.

    Connections are solid arrows, container membership is dotted, and the
    entry node (chain index 0) gets a heavy outline.
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.lines import Line2D
        from matplotlib.patches import Patch
    except ImportError:
        logger.warning("matplotlib is not installed (pip install .[viz]); skipping visualization")
        return False

    members = _membership_edges(g)
    layout_graph = g.copy()
    layout_graph.add_edges_from(members)
    pos = _try_graphviz_layout(layout_graph) or _generation_layout(layout_graph) \
        or nx.spring_layout(layout_graph, seed=42, k=0.7)

    root = next((n for n, a in g.nodes(data=True) if a.get("index") == 0), None)
    order = list(g.nodes())
    fill = [TYPE_COLORS.get(g.nodes[n].get("type", ""), OTHER_COLOR) for n in order]
    outline = [3.5 if n == root else 1.5 for n in order]
    labels = {n: f"{g.nodes[n].get('name') or n}\n({g.nodes[n].get('type', '?')})" for n in order}

    fig, ax = plt.subplots(figsize=(16, 10))
    nx.draw_networkx_nodes(g, pos, ax=ax, nodelist=order, node_color=fill, node_size=2200,
                           edgecolors="#333333", linewidths=outline)
    nx.draw_networkx_edges(g, pos, ax=ax, arrows=True, arrowstyle="-|>", arrowsize=20,
                           width=2.2, edge_color="#444444", node_size=2200)
    if members:
        nx.draw_networkx_edges(g, pos, ax=ax, edgelist=members, arrows=True, arrowstyle="->",
                               arrowsize=12, width=1.2, edge_color="#999999", style="dotted",
                               node_size=2200)
    nx.draw_networkx_labels(g, pos, ax=ax, labels=labels, font_size=8, font_color="#111111")

    # Legend: types actually present, then edge styles
    present = sorted({g.nodes[n].get("type", "") for n in order})
    handles = [Patch(facecolor=TYPE_COLORS.get(t, OTHER_COLOR), edgecolor="#333333", label=t or "untyped")
               for t in present]
    handles.append(Line2D([0], [0], color="#444444", lw=2.2, label="connection"))
    handles.append(Line2D([0], [0], color="#999999", lw=1.2, ls=":", label="NodeIdList member"))
    ax.legend(handles=handles, title="Rule chain", loc="upper left", bbox_to_anchor=(1.01, 1.0))

    ax.set_title(f"Rule chain ({g.number_of_nodes()} nodes, {g.number_of_edges()} connections)")
    ax.axis("off")
    fig.tight_layout()
    fig.savefig(save_path, dpi=150, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    logger.info(f"Chain visualization saved: {save_path}")
    return True
