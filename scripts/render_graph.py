"""
Render the causal map to standalone HTML files.

Reads the dataset from ATLAS_DATA_DIR (default data/graph), runs the 2D force
layout to rest and the 3D clustered layout, and writes both as plotly HTML.
"""

import sys

from atlas import create_runtime, get_settings
from atlas.layout import ForceLayout2D, ViewState, cluster_layout, create_graph_figure, create_graph_figure_3d
from atlas.logging_config import get_logger, setup_logging

# Configuration
OUTPUT_2D = "causal_map.html"
OUTPUT_3D = "causal_map_3d.html"

logger = get_logger("scripts.render_graph")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    runtime = create_runtime(settings)
    store = runtime.store
    nodes, edges = store.nodes, store.edges

    layout = ForceLayout2D(nodes, edges, seed=settings.layout_seed)
    ticks = layout.run()
    logger.info("2D layout settled after %d ticks", ticks)

    view = ViewState()
    create_graph_figure(nodes, edges, layout.positions(), view).write_html(OUTPUT_2D)
    print(f"Wrote {OUTPUT_2D}")

    positions_3d = cluster_layout(nodes, store.causal_edges, seed=settings.layout_seed)
    create_graph_figure_3d(nodes, store.causal_edges, positions_3d, view).write_html(OUTPUT_3D)
    print(f"Wrote {OUTPUT_3D}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
