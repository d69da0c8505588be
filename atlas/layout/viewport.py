"""
Pan/zoom transform and pointer hit testing for the 2D view.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

SCALE_EXTENT = (0.15, 5.0)
HIT_TOLERANCE = 4.0


@dataclass(frozen=True)
class ViewTransform:
    """
    Affine view transform: ``screen = world * k + (x, y)``.
    """
    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, point: Tuple[float, float]) -> Tuple[float, float]:
        px, py = point
        return (px * self.k + self.x, py * self.k + self.y)

    def invert(self, point: Tuple[float, float]) -> Tuple[float, float]:
        px, py = point
        return ((px - self.x) / self.k, (py - self.y) / self.k)

    def translate(self, dx: float, dy: float) -> "ViewTransform":
        """Pan by a screen-space offset."""
        return ViewTransform(self.x + dx, self.y + dy, self.k)

    def scale_to(
        self,
        k: float,
        anchor: Tuple[float, float],
        extent: Tuple[float, float] = SCALE_EXTENT,
    ) -> "ViewTransform":
        """
        Zoom to ``k`` (clamped to ``extent``) keeping the world point under
        the screen ``anchor`` fixed.
        """
        k = float(np.clip(k, *extent))
        wx, wy = self.invert(anchor)
        ax, ay = anchor
        return ViewTransform(ax - wx * k, ay - wy * k, k)

    def zoom(self, factor: float, anchor: Tuple[float, float]) -> "ViewTransform":
        return self.scale_to(self.k * factor, anchor)


IDENTITY = ViewTransform()


def hit_test(
    point: Tuple[float, float],
    transform: ViewTransform,
    node_ids: Sequence[str],
    positions: np.ndarray,
    radii: np.ndarray,
    tolerance: float = HIT_TOLERANCE,
) -> Optional[str]:
    """
    Node under a screen-space pointer.

    The pointer is mapped back to world space and nodes are checked from
    last drawn to first, so the node on top wins when circles overlap.
    """
    if len(node_ids) == 0:
        return None
    wx, wy = transform.invert(point)
    dist = np.hypot(positions[:, 0] - wx, positions[:, 1] - wy)
    inside = dist < radii + tolerance
    for i in range(len(node_ids) - 1, -1, -1):
        if inside[i]:
            return node_ids[i]
    return None
