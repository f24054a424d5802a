"""
Dependency diagram - draw a DependencyGraph onto a matplotlib figure.

The figure mimics the dashboard's interactive diagram: a transparent
background, a legend, and a zoom toolbar banner. The legend and toolbar are
registered as overlay controls so the rasterizer hides them while capturing.
"""

import logging
from typing import Tuple

import networkx as nx
from matplotlib.figure import Figure
from matplotlib.lines import Line2D

from devcontrol.core.graph import DependencyGraph
from devcontrol.render.surface import FigureSurface

logger = logging.getLogger(__name__)

# Colour scheme for the diagram
SERVICE_COLOR = "#2563eb"
CRITICAL_SERVICE_COLOR = "#ef4444"
EDGE_COLOR = "#6b7280"
CRITICAL_EDGE_COLOR = "#ef4444"
LABEL_COLOR = "#1f2937"

TOOLBAR_TEXT = "[ + ]  [ - ]  [ fit ]  [ lock ]"


def render_dependency_diagram(
    graph: DependencyGraph,
    title: str = "Service Dependencies",
    figsize: Tuple[float, float] = (12.0, 7.0),
    dpi: int = 100,
) -> FigureSurface:
    """
    Draw ``graph`` and return it as a capturable surface.

    Args:
        graph: Dependency graph to draw
        title: Diagram title
        figsize: Figure size in inches
        dpi: Screen resolution of the figure

    Returns:
        FigureSurface with legend and toolbar registered as overlay controls
    """
    figure = Figure(figsize=figsize, dpi=dpi)
    surface = FigureSurface(figure)

    # Transparent like the on-screen canvas
    figure.set_facecolor((1.0, 1.0, 1.0, 0.0))

    ax = figure.add_axes([0.02, 0.02, 0.96, 0.90])
    ax.set_axis_off()
    ax.set_facecolor((1.0, 1.0, 1.0, 0.0))
    ax.set_title(title, color=LABEL_COLOR, fontsize=14, loc="left")

    nx_graph = graph.nx_graph
    if len(nx_graph):
        positions = graph.layout()
        critical_services = graph.get_critical_services()
        node_colors = [
            CRITICAL_SERVICE_COLOR if n in critical_services else SERVICE_COLOR
            for n in nx_graph.nodes()
        ]
        edge_colors = [
            CRITICAL_EDGE_COLOR if data.get("critical") else EDGE_COLOR
            for _, _, data in nx_graph.edges(data=True)
        ]

        nx.draw_networkx_nodes(nx_graph, positions, ax=ax, node_color=node_colors, node_size=900, alpha=0.9)
        nx.draw_networkx_edges(
            nx_graph, positions, ax=ax, edge_color=edge_colors,
            arrows=True, arrowsize=14, node_size=900, width=1.5,
        )
        nx.draw_networkx_labels(nx_graph, positions, ax=ax, font_size=8, font_color=LABEL_COLOR)

    legend = figure.legend(
        handles=[
            Line2D([0], [0], marker="o", color="w", markerfacecolor=SERVICE_COLOR, markersize=10, label="Service"),
            Line2D([0], [0], marker="o", color="w", markerfacecolor=CRITICAL_SERVICE_COLOR,
                   markersize=10, label="On critical path"),
            Line2D([0], [0], color=CRITICAL_EDGE_COLOR, label="Critical dependency"),
        ],
        loc="lower left",
        frameon=True,
    )
    surface.add_control(legend)

    toolbar = figure.text(
        0.98, 0.96, TOOLBAR_TEXT,
        ha="right", va="top", fontsize=9, color=LABEL_COLOR,
        bbox={"boxstyle": "round", "facecolor": "#f3f4f6", "edgecolor": EDGE_COLOR},
    )
    surface.add_control(toolbar)

    logger.debug(f"Rendered diagram with {len(nx_graph)} services")
    return surface
