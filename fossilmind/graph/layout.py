"""
Force-directed layout.

Nodes start evenly spaced on a circle, then repel each other (inverse square)
and are pulled together along edges (spring proportional to distance and edge
weight) under a temperature that cools linearly to zero. Final positions are
scaled uniformly and centered to fit the viewport minus padding.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from fossilmind.configuration.models import LayoutConfig
from fossilmind.models.graph import GraphEdge, GraphNode
from fossilmind.observability import log_operation

logger = logging.getLogger(__name__)


def initial_positions(count: int, width: float, height: float) -> np.ndarray:
    radius = min(width, height) * 0.35
    angles = 2 * np.pi * np.arange(count) / count
    return np.column_stack((width / 2 + radius * np.cos(angles),
                            height / 2 + radius * np.sin(angles)))


def _repulsion(positions: np.ndarray, strength: float) -> np.ndarray:
    delta = positions[:, None, :] - positions[None, :, :]
    dist = np.maximum(np.sqrt((delta ** 2).sum(axis=2)), 1.0)
    force = strength / (dist * dist)
    # Self pairs have zero delta and contribute nothing
    return (delta / dist[..., None] * force[..., None]).sum(axis=1)


def _attraction(positions: np.ndarray, sources: np.ndarray, targets: np.ndarray,
                weights: np.ndarray, spring: float) -> np.ndarray:
    forces = np.zeros_like(positions)
    if sources.size == 0:
        return forces
    delta = positions[targets] - positions[sources]
    dist = np.maximum(np.sqrt((delta ** 2).sum(axis=1)), 1.0)
    pull = (delta / dist[:, None]) * (dist * spring * weights)[:, None]
    np.add.at(forces, sources, pull)
    np.add.at(forces, targets, -pull)
    return forces


def fit_to_viewport(positions: np.ndarray, width: float, height: float, padding: float) -> np.ndarray:
    """Uniformly scale (never enlarging) and center positions inside the padded viewport."""
    padding = max(min(padding, width / 2, height / 2), 0.0)
    lo = positions.min(axis=0)
    span = positions.max(axis=0) - lo
    avail = np.array([width - 2 * padding, height - 2 * padding])
    scales = [avail[i] / span[i] if span[i] > 0 else 1.0 for i in range(2)]
    scale = min(scales[0], scales[1], 1.0)
    offset = padding + (avail - span * scale) / 2
    return (positions - lo) * scale + offset


@log_operation("layout_graph", component="graph")
def layout_graph(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge],
                 width: Optional[float] = None, height: Optional[float] = None,
                 iterations: Optional[int] = None,
                 config: Optional[LayoutConfig] = None) -> List[GraphNode]:
    """Write x/y onto each node in place and return the nodes.

    Edges whose endpoints are not among ``nodes`` are ignored. With no nodes
    the input is returned untouched.
    """
    if not nodes:
        return list(nodes)

    cfg = config or LayoutConfig()
    width = cfg.width if width is None else width
    height = cfg.height if height is None else height
    iterations = cfg.iterations if iterations is None else iterations

    index = {node.id: i for i, node in enumerate(nodes)}
    linked = [e for e in edges if e.source in index and e.target in index]
    sources = np.array([index[e.source] for e in linked], dtype=int)
    targets = np.array([index[e.target] for e in linked], dtype=int)
    weights = np.array([e.weight for e in linked], dtype=float)

    positions = initial_positions(len(nodes), width, height)
    velocity = np.zeros_like(positions)

    for step in range(iterations):
        temperature = 1 - step / iterations
        velocity += _repulsion(positions, cfg.repulsion) * temperature
        velocity += _attraction(positions, sources, targets, weights, cfg.spring) * temperature
        positions += velocity * cfg.step
        velocity *= cfg.damping

    positions = fit_to_viewport(positions, width, height, cfg.padding)
    for node, (x, y) in zip(nodes, positions):
        node.x = float(x)
        node.y = float(y)

    logger.debug(f"Laid out {len(nodes)} nodes over {iterations} iterations")
    return list(nodes)
