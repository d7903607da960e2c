"""
Visualization Module

Provides functions for visualizing the access network layout and the
per-flow statistics of a run.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from typing import Dict, Optional, Tuple

from .layout import Position
from .topology import AccessNetworkTopology, LinkTier, NodeRole


TIER_STYLES = {
    LinkTier.CORE: dict(c='black', linewidth=2.0, alpha=0.8),
    LinkTier.ACCESS: dict(c='gray', linewidth=1.0, alpha=0.6),
    LinkTier.LOCAL: dict(c='lightgray', linewidth=0.3, alpha=0.4),
}

ROLE_STYLES = {
    NodeRole.CENTRAL_SERVER: dict(c='blue', s=150, marker='s'),
    NodeRole.CORE_ROUTER: dict(c='orange', s=120, marker='D'),
    NodeRole.SITE_ROUTER: dict(c='green', s=80, marker='^'),
    NodeRole.DEVICE: dict(c='steelblue', s=8, marker='o'),
}


def plot_network_layout(
    topology: AccessNetworkTopology,
    positions: Optional[Dict[str, Position]] = None,
    figsize: Tuple[int, int] = (10, 10),
    show_links: bool = True,
    title: str = "Access Network Layout"
) -> plt.Figure:
    """
    Plot node positions and links

    Args:
        topology: Built topology
        positions: Node positions (default: positions stored on the nodes)
        figsize: Figure size
        show_links: Whether to draw links
        title: Plot title

    Returns:
        Matplotlib figure
    """
    if positions is None:
        positions = {
            node_id: node.position
            for node_id, node in topology.nodes.items()
            if node.position is not None
        }

    fig, ax = plt.subplots(figsize=figsize)

    if show_links:
        for link in topology.links.values():
            if link.source not in positions or link.target not in positions:
                continue
            (x1, y1), (x2, y2) = positions[link.source], positions[link.target]
            ax.plot([x1, x2], [y1, y2], zorder=1, **TIER_STYLES[link.tier])

    for role, style in ROLE_STYLES.items():
        nodes = [n for n in topology.get_nodes_by_role(role) if n.id in positions]
        if not nodes:
            continue
        xs = [positions[n.id][0] for n in nodes]
        ys = [positions[n.id][1] for n in nodes]
        ax.scatter(xs, ys, label=role.value.replace("_", " ").title(), zorder=3, **style)

    for i in range(topology.site_count):
        router_id = topology.get_site_router(i).id
        if router_id in positions:
            x, y = positions[router_id]
            ax.annotate(
                topology.get_access_profile(i).label, (x, y),
                textcoords="offset points", xytext=(0, 8), ha='center', fontsize=7
            )

    ax.set_aspect('equal')
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(loc='upper right', fontsize=8)

    plt.tight_layout()
    return fig


def plot_flow_statistics(
    flows: pd.DataFrame,
    figsize: Tuple[int, int] = (14, 5),
    title: str = "Flow Statistics"
) -> plt.Figure:
    """
    Plot per-flow throughput and mean delay

    Args:
        flows: Per-flow table from FlowStatsAggregator.to_dataframe
        figsize: Figure size
        title: Plot title

    Returns:
        Matplotlib figure
    """
    fig, axes = plt.subplots(1, 2, figsize=figsize)

    if flows.empty:
        for ax in axes:
            ax.text(0.5, 0.5, "No flow data", ha='center', va='center')
        fig.suptitle(title, fontsize=14, fontweight='bold')
        return fig

    x = np.arange(len(flows))

    ax = axes[0]
    ax.bar(x, flows["throughput_mbps"], color='tab:blue')
    ax.set_xlabel("Flow")
    ax.set_ylabel("Throughput (Mbps)")
    ax.set_title("Throughput per Flow")
    ax.grid(True, alpha=0.3, axis='y')

    ax = axes[1]
    delays = flows["mean_delay_ms"].dropna()
    if not delays.empty:
        ax.hist(delays, bins=min(30, len(delays)), color='purple', alpha=0.7, edgecolor='black')
    ax.set_xlabel("Mean Delay (ms)")
    ax.set_ylabel("Flows")
    ax.set_title("Mean Delay Distribution")
    ax.grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=14, fontweight='bold')
    plt.tight_layout()
    return fig


def save_all_plots(
    topology: AccessNetworkTopology,
    flows: Optional[pd.DataFrame] = None,
    output_dir: str = ".",
    prefix: str = "access-network"
):
    """
    Save standard plots to files

    Args:
        topology: Topology with positions assigned
        flows: Per-flow table (optional)
        output_dir: Output directory
        prefix: Filename prefix
    """
    import os

    os.makedirs(output_dir, exist_ok=True)

    fig = plot_network_layout(topology)
    fig.savefig(os.path.join(output_dir, f"{prefix}_layout.png"), dpi=150)
    plt.close(fig)

    if flows is not None:
        fig = plot_flow_statistics(flows)
        fig.savefig(os.path.join(output_dir, f"{prefix}_flows.png"), dpi=150)
        plt.close(fig)

    print(f"Plots saved to {output_dir}/")
