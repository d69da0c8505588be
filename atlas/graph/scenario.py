"""
Scenario propagation over causal edges.

Answers "if X increases (or decreases), what moves downstream, which way, and
how strongly". Breadth-first over causal edges only, layer by layer:

- direction: a positive edge keeps the parent direction, a negative edge
  inverts it, a complex edge (or a complex parent) yields complex;
- strength: an edge leaving a node found at depth d keeps its own strength
  stepped down d-1 places on strong > medium > weak, clamped at weak, and is
  never stronger than the strength of the node it leaves;
- visitation: a node is finalized the first time BFS reaches it and is never
  re-scored, even if a later path would be stronger.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Deque, Dict, List, Optional, Union

from .models import Edge, EdgeDirection, EdgeStrength
from .store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3


class ScenarioAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class ImpactDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    COMPLEX = "complex"

    def inverted(self) -> "ImpactDirection":
        if self is ImpactDirection.UP:
            return ImpactDirection.DOWN
        if self is ImpactDirection.DOWN:
            return ImpactDirection.UP
        return self


@dataclass(frozen=True)
class ScenarioResult:
    """
    One downstream effect of a stimulus.

    Attributes:
        node_id: The affected node.
        direction: Inferred movement of the node.
        strength: Attenuated strength at this depth.
        mechanism: Mechanism text of the edge that reached the node first.
        time_lag: Time-lag label of that edge, if any.
        depth: Hop count from the stimulus node (1 = direct).
    """
    node_id: str
    direction: ImpactDirection
    strength: EdgeStrength
    mechanism: str
    time_lag: Optional[str]
    depth: int

    def to_dict(self) -> Dict:
        out = asdict(self)
        out["direction"] = self.direction.value
        out["strength"] = self.strength.value
        return out


@dataclass(frozen=True)
class ScenarioSummary:
    total: int
    up: int
    down: int
    complex: int
    strong: int


def compose_direction(parent: ImpactDirection, edge_direction: Optional[EdgeDirection]) -> ImpactDirection:
    """Direction of a child reached from ``parent`` through an edge."""
    if parent is ImpactDirection.COMPLEX:
        return ImpactDirection.COMPLEX
    if edge_direction == EdgeDirection.POSITIVE:
        return parent
    if edge_direction == EdgeDirection.NEGATIVE:
        return parent.inverted()
    return ImpactDirection.COMPLEX


def stimulus_direction(action: ScenarioAction) -> ImpactDirection:
    return ImpactDirection.UP if action is ScenarioAction.INCREASE else ImpactDirection.DOWN


def _edge_strength(edge: Edge) -> EdgeStrength:
    return edge.strength or EdgeStrength.MEDIUM


def attenuate(edge_strength: EdgeStrength, parent_strength: EdgeStrength, parent_depth: int) -> EdgeStrength:
    """
    Strength of a child reached from a node found at ``parent_depth``.

    Direct effects (``parent_depth`` 0 or 1) keep the edge strength; deeper
    hops step it down ``parent_depth - 1`` places. The result is capped at the
    parent strength so decay along a path is monotonic.
    """
    stepped = edge_strength.weakened(max(parent_depth - 1, 0))
    return max(stepped, parent_strength, key=lambda s: s.rank)


class ScenarioPropagator:
    """
    Bounded-depth stimulus propagation.

    Args:
        store: Graph store supplying causal adjacency (its ``edge_order``
            decides which edge reaches a node first when several tie).
        max_depth: Default hop bound.
    """

    def __init__(self, store: GraphStore, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        self.store = store
        self.max_depth = max_depth

    def run(
        self,
        node_id: str,
        action: Union[ScenarioAction, str],
        max_depth: Optional[int] = None,
    ) -> List[ScenarioResult]:
        """
        Propagate a stimulus from ``node_id``.

        Results come out in BFS discovery order. The source node is never part
        of the result; an unknown node or one without outgoing causal edges
        yields an empty list.
        """
        action = ScenarioAction(action)
        depth_limit = self.max_depth if max_depth is None else max_depth
        if depth_limit < 0:
            raise ValueError("max_depth must be non-negative")

        results: List[ScenarioResult] = []
        visited = {node_id}
        queue: Deque[tuple] = deque([(node_id, stimulus_direction(action), EdgeStrength.STRONG, 0)])

        while queue:
            current, direction, strength, depth = queue.popleft()
            if depth >= depth_limit:
                continue

            for edge in self.store.outgoing_causal(current):
                if edge.target in visited:
                    continue
                visited.add(edge.target)

                child_depth = depth + 1
                child_direction = compose_direction(direction, edge.direction)
                child_strength = attenuate(_edge_strength(edge), strength, depth)
                results.append(ScenarioResult(
                    node_id=edge.target,
                    direction=child_direction,
                    strength=child_strength,
                    mechanism=edge.mechanism or "",
                    time_lag=edge.time_lag,
                    depth=child_depth,
                ))
                queue.append((edge.target, child_direction, child_strength, child_depth))

        logger.debug("Scenario %s %s: %d affected nodes", node_id, action.value, len(results))
        return results


# =============================================================================
# Result helpers
# =============================================================================

def sort_by_strength(results: List[ScenarioResult]) -> List[ScenarioResult]:
    """Strongest first; stable within a strength band."""
    return sorted(results, key=lambda r: r.strength.rank)


def summarize(results: List[ScenarioResult]) -> ScenarioSummary:
    return ScenarioSummary(
        total=len(results),
        up=sum(1 for r in results if r.direction is ImpactDirection.UP),
        down=sum(1 for r in results if r.direction is ImpactDirection.DOWN),
        complex=sum(1 for r in results if r.direction is ImpactDirection.COMPLEX),
        strong=sum(1 for r in results if r.strength is EdgeStrength.STRONG),
    )


def scenario_direction_map(results: List[ScenarioResult]) -> Dict[str, ImpactDirection]:
    """node id → inferred direction, the form the visual layer consumes."""
    return {r.node_id: r.direction for r in results}
