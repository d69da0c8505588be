"""
2D Force-Directed Layout

A velocity-Verlet style force simulation with d3-force semantics, split in
two parts:

- ``step(state, forces, config, dt)``: pure physics, returns a new state;
- ``ForceLayout2D``: the host that owns the current state, drives ticks,
  handles selection (focus mode) and notifies tick listeners.

Forces, applied in this order each tick:
1. Link: spring toward an edge-type specific rest length
2. Many-body: pairwise repulsion, cut off beyond ``charge_distance_max``
3. Center: shifts the whole layout so its mean sits at the viewport center
4. Collide: separates overlapping circles (node radius + padding)
5. Position: weak pull of every node toward the center on x and y
6. Focus: per-node pull toward a target, only for nodes next to the selection
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Collection, Dict, List, Optional, Sequence, Tuple

import numpy as np

from atlas.graph.models import BaseNode, Edge, EdgeType, node_type
from .palette import node_radius
from .visual import neighbor_ids

logger = logging.getLogger(__name__)

# Replaces exact zero separations so coincident nodes still push apart.
_JIGGLE = 1e-6


@dataclass(frozen=True)
class ForceConfig:
    """Simulation parameters."""
    width: float = 800.0
    height: float = 600.0

    # ===== Link force =====
    link_distance: Dict[EdgeType, float] = field(default_factory=lambda: {
        EdgeType.BELONGS_TO: 40.0,
        EdgeType.SUPPLY_CHAIN: 70.0,
        EdgeType.CAUSAL: 100.0,
    })
    link_strength: Dict[EdgeType, float] = field(default_factory=lambda: {
        EdgeType.BELONGS_TO: 0.8,
        EdgeType.SUPPLY_CHAIN: 0.3,
        EdgeType.CAUSAL: 0.15,
    })

    # ===== Many-body / center / collide / position =====
    charge_strength: float = -180.0
    charge_distance_min: float = 1.0
    charge_distance_max: float = 350.0
    center_strength: float = 0.05
    collide_padding: float = 4.0
    position_strength: float = 0.02

    # ===== Focus mode =====
    focus_strength: float = 0.15
    focus_causal_offset: float = 180.0     # causes above, effects below
    focus_supply_offset: float = 200.0     # upstream left, downstream right
    focus_membership_offset: float = 100.0  # sector below

    # ===== Cooling =====
    alpha_initial: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 0.02
    alpha_target: float = 0.0
    velocity_decay: float = 0.4
    reheat_alpha: float = 0.5

    @property
    def center(self) -> Tuple[float, float]:
        return (self.width / 2, self.height / 2)


@dataclass
class SimulationState:
    """
    Mutable-by-replacement simulation state.

    ``pinned`` holds a fixed position per node, NaN for free nodes.
    """
    positions: np.ndarray
    velocities: np.ndarray
    pinned: np.ndarray
    alpha: float

    def copy(self) -> "SimulationState":
        return SimulationState(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            pinned=self.pinned.copy(),
            alpha=self.alpha,
        )

    @property
    def free(self) -> np.ndarray:
        return np.isnan(self.pinned[:, 0])


@dataclass(frozen=True)
class ForceSet:
    """
    Index-space description of everything the forces act on.

    Links are given as node index pairs with per-link rest length, strength
    and bias (share of the correction taken by the target end).
    """
    radii: np.ndarray
    link_source: np.ndarray
    link_target: np.ndarray
    link_distance: np.ndarray
    link_strength: np.ndarray
    link_bias: np.ndarray
    focus_targets: Optional[np.ndarray] = None   # (n, 2)
    focus_strength: Optional[np.ndarray] = None  # (n,)

    @property
    def size(self) -> int:
        return len(self.radii)


def build_links(
    index: Dict[str, int],
    edges: Sequence[Edge],
    config: ForceConfig,
) -> Tuple[np.ndarray, ...]:
    """Index arrays for the link force; edges with an unknown endpoint are dropped."""
    pairs = [(index[e.source], index[e.target], EdgeType(e.type)) for e in edges
             if e.source in index and e.target in index]
    n = len(index)
    if not pairs:
        empty_i = np.zeros(0, dtype=int)
        empty_f = np.zeros(0, dtype=float)
        return empty_i, empty_i, empty_f, empty_f, empty_f

    source = np.array([p[0] for p in pairs], dtype=int)
    target = np.array([p[1] for p in pairs], dtype=int)
    distance = np.array([config.link_distance.get(p[2], 100.0) for p in pairs], dtype=float)
    strength = np.array([config.link_strength.get(p[2], 0.15) for p in pairs], dtype=float)

    degree = np.bincount(source, minlength=n) + np.bincount(target, minlength=n)
    bias = degree[source] / (degree[source] + degree[target])
    return source, target, distance, strength, bias


# =============================================================================
# Forces
# =============================================================================

def _link_force(pos, vel, forces: ForceSet, alpha: float) -> None:
    if forces.link_source.size == 0:
        return
    s, t = forces.link_source, forces.link_target
    delta = (pos[t] + vel[t]) - (pos[s] + vel[s])
    delta[delta == 0] = _JIGGLE
    length = np.sqrt((delta ** 2).sum(axis=1))
    scale = (length - forces.link_distance) / length * alpha * forces.link_strength
    delta *= scale[:, None]
    b = forces.link_bias[:, None]
    np.add.at(vel, t, -delta * b)
    np.add.at(vel, s, delta * (1 - b))


def _many_body_force(pos, vel, config: ForceConfig, alpha: float) -> None:
    n = len(pos)
    if n < 2:
        return
    diff = pos[None, :, :] - pos[:, None, :]            # other - self
    dist2 = (diff ** 2).sum(axis=2)
    dmin2 = config.charge_distance_min ** 2
    dist2 = np.where(dist2 < dmin2, np.sqrt(dmin2 * dist2), dist2)
    mask = dist2 < config.charge_distance_max ** 2
    np.fill_diagonal(mask, False)
    safe = np.where(mask & (dist2 > 0), dist2, np.inf)
    weight = config.charge_strength * alpha / safe
    vel += (diff * weight[:, :, None]).sum(axis=1)


def _center_force(pos, config: ForceConfig) -> None:
    if len(pos) == 0:
        return
    shift = (pos.mean(axis=0) - np.asarray(config.center)) * config.center_strength
    pos -= shift


def _collide_force(pos, vel, radii: np.ndarray) -> None:
    n = len(pos)
    if n < 2:
        return
    predicted = pos + vel
    i, j = np.triu_indices(n, k=1)
    delta = predicted[i] - predicted[j]
    reach = radii[i] + radii[j]
    dist2 = (delta ** 2).sum(axis=1)
    hit = dist2 < reach ** 2
    if not hit.any():
        return
    i, j, delta, reach = i[hit], j[hit], delta[hit], reach[hit]
    delta[delta == 0] = _JIGGLE
    length = np.sqrt((delta ** 2).sum(axis=1))
    delta *= ((reach - length) / length)[:, None]
    ri2, rj2 = radii[i] ** 2, radii[j] ** 2
    share = (rj2 / (ri2 + rj2))[:, None]
    np.add.at(vel, i, delta * share)
    np.add.at(vel, j, -delta * (1 - share))


def _position_force(pos, vel, config: ForceConfig, alpha: float) -> None:
    vel += (np.asarray(config.center) - pos) * config.position_strength * alpha


def _focus_force(pos, vel, forces: ForceSet, alpha: float) -> None:
    if forces.focus_targets is None or forces.focus_strength is None:
        return
    vel += (forces.focus_targets - pos) * forces.focus_strength[:, None] * alpha


def step(
    state: SimulationState,
    forces: ForceSet,
    config: ForceConfig,
    dt: float = 1.0,
) -> SimulationState:
    """
    Advance the simulation by one tick.

    Cools alpha toward ``alpha_target``, accumulates every force into the
    velocities, applies velocity decay and integrates. Pinned nodes are held
    at their pinned position with zero velocity. The input state is not
    modified.
    """
    alpha = state.alpha + (config.alpha_target - state.alpha) * config.alpha_decay
    pos = state.positions.copy()
    vel = state.velocities.copy()

    _link_force(pos, vel, forces, alpha)
    _many_body_force(pos, vel, config, alpha)
    _center_force(pos, config)
    _collide_force(pos, vel, forces.radii + config.collide_padding)
    _position_force(pos, vel, config, alpha)
    _focus_force(pos, vel, forces, alpha)

    free = state.free
    vel[free] *= (1.0 - config.velocity_decay)
    pos[free] += vel[free] * dt
    pos[~free] = state.pinned[~free]
    vel[~free] = 0.0

    return SimulationState(positions=pos, velocities=vel, pinned=state.pinned.copy(), alpha=alpha)


# =============================================================================
# Focus mode
# =============================================================================

def focus_layout(
    selected_id: str,
    node_ids: Sequence[str],
    edges: Sequence[Edge],
    config: ForceConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Per-node focus targets and strengths around ``selected_id``.

    Each neighbour of the selection is placed by the first edge (in edge
    order) joining the two: causes above, effects below, supply-chain
    upstream left and downstream right, membership slightly below. Nodes not
    adjacent to the selection get zero strength.
    """
    cx, cy = config.center
    index = {nid: i for i, nid in enumerate(node_ids)}
    targets = np.tile(np.array([cx, cy], dtype=float), (len(node_ids), 1))
    strength = np.zeros(len(node_ids), dtype=float)

    placed = set()
    for edge in edges:
        other = edge.other_end(selected_id)
        if other is None or other == selected_id or other in placed or other not in index:
            continue
        placed.add(other)
        i = index[other]
        kind = EdgeType(edge.type)
        tx, ty = cx, cy
        if kind is EdgeType.SUPPLY_CHAIN:
            upstream = edge.target == selected_id
            tx = cx - config.focus_supply_offset if upstream else cx + config.focus_supply_offset
        elif kind is EdgeType.CAUSAL:
            cause = edge.target == selected_id
            ty = cy - config.focus_causal_offset if cause else cy + config.focus_causal_offset
        elif kind is EdgeType.BELONGS_TO:
            ty = cy + config.focus_membership_offset
        targets[i] = (tx, ty)
        strength[i] = config.focus_strength
    return targets, strength


# =============================================================================
# Host
# =============================================================================

TickListener = Callable[[SimulationState], None]


class ForceLayout2D:
    """
    Interactive 2D layout.

    Args:
        nodes: Nodes to lay out; their order is the draw order.
        edges: Merged edge list. All of it drives focus mode and
            connectivity; only edges passing ``edge_filter`` feed the link
            force.
        config: Simulation parameters.
        seed: Seed for the initial random placement.
        edge_filter: Edge types kept for the link force, None for all.
    """

    def __init__(
        self,
        nodes: Sequence[BaseNode],
        edges: Sequence[Edge],
        config: Optional[ForceConfig] = None,
        seed: int = 42,
        edge_filter: Optional[Collection[EdgeType]] = None,
    ):
        self.config = config or ForceConfig()
        self.nodes = list(nodes)
        self.edges = list(edges)
        self.node_ids = [n.id for n in self.nodes]
        self.index = {nid: i for i, nid in enumerate(self.node_ids)}
        self.radii = np.array([node_radius(node_type(n)) for n in self.nodes], dtype=float)
        self.selected_id: Optional[str] = None
        self._listeners: List[TickListener] = []
        self._edge_filter = self._normalize_filter(edge_filter)

        rng = np.random.default_rng(seed)
        n = len(self.nodes)
        positions = np.column_stack([
            rng.uniform(0, self.config.width, n),
            rng.uniform(0, self.config.height, n),
        ]) if n else np.zeros((0, 2))
        self.state = SimulationState(
            positions=positions,
            velocities=np.zeros((n, 2)),
            pinned=np.full((n, 2), np.nan),
            alpha=self.config.alpha_initial,
        )
        self.forces = self._build_forces()
        self.ticks = 0

    @staticmethod
    def _normalize_filter(edge_filter):
        if edge_filter is None:
            return None
        return {EdgeType(t) for t in edge_filter}

    @property
    def link_edges(self) -> List[Edge]:
        if self._edge_filter is None:
            return self.edges
        return [e for e in self.edges if EdgeType(e.type) in self._edge_filter]

    def _build_forces(self) -> ForceSet:
        source, target, distance, strength, bias = build_links(self.index, self.link_edges, self.config)
        targets = strengths = None
        if self.selected_id is not None:
            targets, strengths = focus_layout(self.selected_id, self.node_ids, self.edges, self.config)
        return ForceSet(
            radii=self.radii,
            link_source=source,
            link_target=target,
            link_distance=distance,
            link_strength=strength,
            link_bias=bias,
            focus_targets=targets,
            focus_strength=strengths,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def on_tick(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Selection and filters
    # ------------------------------------------------------------------
    def connected_ids(self, node_id: Optional[str] = None) -> set:
        return neighbor_ids(self.edges, node_id if node_id is not None else self.selected_id)

    def select(self, node_id: Optional[str]) -> None:
        """
        Focus on ``node_id`` (None clears focus).

        The selected node is pinned at the viewport center and its neighbours
        get focus targets; clearing unpins every node. Either way the
        simulation is reheated.
        """
        pinned = np.full((len(self.nodes), 2), np.nan)
        if node_id is not None and node_id in self.index:
            pinned[self.index[node_id]] = self.config.center
            self.selected_id = node_id
        else:
            if node_id is not None:
                logger.debug("Focus on unknown node %s ignored", node_id)
            self.selected_id = None
        self.state = replace(self.state, pinned=pinned)
        self.forces = self._build_forces()
        self.reheat()

    def clear_focus(self) -> None:
        self.select(None)

    def set_edge_filter(self, edge_filter: Optional[Collection[EdgeType]]) -> None:
        self._edge_filter = self._normalize_filter(edge_filter)
        self.forces = self._build_forces()
        self.reheat(self.config.alpha_initial)

    def reheat(self, alpha: Optional[float] = None) -> None:
        self.state = replace(self.state, alpha=self.config.reheat_alpha if alpha is None else alpha)

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self.state.alpha >= self.config.alpha_min

    def tick(self, dt: float = 1.0) -> SimulationState:
        self.state = step(self.state, self.forces, self.config, dt)
        self.ticks += 1
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until alpha drops below ``alpha_min`` (or ``max_ticks``); returns ticks run."""
        count = 0
        while self.running and (max_ticks is None or count < max_ticks):
            self.tick()
            count += 1
        logger.debug("Force layout settled after %d ticks (alpha=%.4f)", count, self.state.alpha)
        return count

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {
            nid: (float(x), float(y))
            for nid, (x, y) in zip(self.node_ids, self.state.positions)
        }

    def position_of(self, node_id: str) -> Optional[Tuple[float, float]]:
        i = self.index.get(node_id)
        if i is None:
            return None
        x, y = self.state.positions[i]
        return (float(x), float(y))
