"""
Static dataset loading.

The dataset is a directory of JSON files, one per node variant plus the
authored causal edge list::

    <data_dir>/nodes/macro.json
    <data_dir>/nodes/sectors.json
    <data_dir>/nodes/themes.json
    <data_dir>/nodes/companies.json
    <data_dir>/edges/macro-causal.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Type, Union

from pydantic import TypeAdapter, ValidationError

from atlas.exceptions import DatasetError
from .models import CompanyNode, Edge, GraphData, MacroNode, SectorNode, ThemeNode

logger = logging.getLogger(__name__)

NODE_FILES = {
    "macro": ("nodes/macro.json", MacroNode),
    "sector": ("nodes/sectors.json", SectorNode),
    "theme": ("nodes/themes.json", ThemeNode),
    "company": ("nodes/companies.json", CompanyNode),
}
CAUSAL_EDGE_FILE = "edges/macro-causal.json"


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise DatasetError(f"Dataset file not found: {path}", path=str(path))
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Invalid JSON in {path}: {exc}", path=str(path)) from exc


def _parse_list(path: Path, model: Type) -> List:
    raw = _read_json(path)
    try:
        return TypeAdapter(List[model]).validate_python(raw)
    except ValidationError as exc:
        raise DatasetError(
            f"{path} failed validation ({exc.error_count()} errors): {exc}", path=str(path)
        ) from exc


def load_graph_data(data_dir: Union[str, Path]) -> GraphData:
    """
    Load the full dataset from ``data_dir``.

    Nodes are concatenated in variant order (macro, sector, theme, company),
    which is the order consumers see them in.

    Raises:
        DatasetError: a file is missing, is not JSON, or fails validation.
    """
    root = Path(data_dir)
    nodes: List = []
    for variant, (rel_path, model) in NODE_FILES.items():
        parsed = _parse_list(root / rel_path, model)
        logger.debug("Loaded %d %s nodes from %s", len(parsed), variant, rel_path)
        nodes.extend(parsed)

    edges = _parse_list(root / CAUSAL_EDGE_FILE, Edge)
    logger.info("Loaded dataset from %s: %d nodes, %d causal edges", root, len(nodes), len(edges))
    return GraphData(nodes=nodes, edges=edges)
