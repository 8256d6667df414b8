"""Barnes-Hut 2D quadtree approximation for O(N log N) forces.

The tree lives in two flat arrays (an arena). Row ``k`` of ``nodes``
holds node k's square region (centre, side) and its aggregate (mass,
centre of mass); row ``k`` of ``links`` holds its depth, the index of its
first child (children are ``first .. first + 3``, -1 for a leaf) and the
head and length of its leaf bucket. Bucket members are chained through
``next_in_leaf``. Children are always allocated after their parent, so
aggregates are filled in a single reverse sweep over the arena.

Build and traversal are compiled with numba; the traversal releases the
GIL so worker threads can walk the same tree concurrently.
"""

import math
import numpy as np
from numba import njit
from gravity_sim.physics.force_algorithms.base import ForceAlgorithm, DEFAULT_G, DEFAULT_EPSILON
from gravity_sim.physics.force_algorithms.workers import run_sharded

DEFAULT_THETA = 0.5
# Subdivision stops here; coincident particles then share one leaf bucket
MAX_DEPTH = 48

# nodes columns
CX, CY, SIZE, MASS, COM_X, COM_Y = 0, 1, 2, 3, 4, 5
# links columns
DEPTH, FIRST_CHILD, HEAD, COUNT = 0, 1, 2, 3


@njit(cache=True)
def _add_node(nodes, links, n_nodes, cx, cy, size, depth):
    if n_nodes == nodes.shape[0]:
        grown_nodes = np.zeros((2 * n_nodes, 6))
        grown_links = np.full((2 * n_nodes, 4), -1, dtype=np.int64)
        grown_nodes[:n_nodes] = nodes
        grown_links[:n_nodes] = links
        nodes = grown_nodes
        links = grown_links
    nodes[n_nodes, CX] = cx
    nodes[n_nodes, CY] = cy
    nodes[n_nodes, SIZE] = size
    links[n_nodes, DEPTH] = depth
    links[n_nodes, FIRST_CHILD] = -1
    links[n_nodes, HEAD] = -1
    links[n_nodes, COUNT] = 0
    return nodes, links, n_nodes + 1


@njit(cache=True)
def _child_for(nodes, links, node, x, y):
    quadrant = 0
    if x >= nodes[node, CX]:
        quadrant += 1
    if y >= nodes[node, CY]:
        quadrant += 2
    return links[node, FIRST_CHILD] + quadrant


@njit(cache=True)
def build_arena(xs, ys, ms):
    """Build the quadtree over non-empty coordinate and mass arrays.

    Returns:
        (nodes, links, next_in_leaf) trimmed to the nodes in use
    """
    n = xs.shape[0]
    capacity = 4 * n + 1
    nodes = np.zeros((capacity, 6))
    links = np.full((capacity, 4), -1, dtype=np.int64)
    next_in_leaf = np.full(n, -1, dtype=np.int64)

    x_min, x_max = xs.min(), xs.max()
    y_min, y_max = ys.min(), ys.max()
    size = max(x_max - x_min, y_max - y_min)
    size = size * 1.001 if size > 0 else 1.0
    nodes, links, n_nodes = _add_node(
        nodes, links, 0, (x_min + x_max) / 2, (y_min + y_max) / 2, size, 0
    )

    for i in range(n):
        node = 0
        while True:
            if links[node, FIRST_CHILD] >= 0:
                node = _child_for(nodes, links, node, xs[i], ys[i])
                continue
            if links[node, COUNT] == 0 or links[node, DEPTH] >= MAX_DEPTH:
                next_in_leaf[i] = links[node, HEAD]
                links[node, HEAD] = i
                links[node, COUNT] += 1
                break
            # Occupied leaf: split it, push its one particle down and retry
            half = nodes[node, SIZE] / 2
            quarter = half / 2
            cx, cy = nodes[node, CX], nodes[node, CY]
            depth = links[node, DEPTH] + 1
            first = n_nodes
            # Order matches _child_for: SW, SE, NW, NE
            nodes, links, n_nodes = _add_node(nodes, links, n_nodes, cx - quarter, cy - quarter, half, depth)
            nodes, links, n_nodes = _add_node(nodes, links, n_nodes, cx + quarter, cy - quarter, half, depth)
            nodes, links, n_nodes = _add_node(nodes, links, n_nodes, cx - quarter, cy + quarter, half, depth)
            nodes, links, n_nodes = _add_node(nodes, links, n_nodes, cx + quarter, cy + quarter, half, depth)
            links[node, FIRST_CHILD] = first
            j = links[node, HEAD]
            links[node, HEAD] = -1
            links[node, COUNT] = 0
            child = _child_for(nodes, links, node, xs[j], ys[j])
            next_in_leaf[j] = -1
            links[child, HEAD] = j
            links[child, COUNT] = 1
            node = _child_for(nodes, links, node, xs[i], ys[i])

    for node in range(n_nodes - 1, -1, -1):
        m = 0.0
        mx = 0.0
        my = 0.0
        first = links[node, FIRST_CHILD]
        if first >= 0:
            for child in range(first, first + 4):
                mc = nodes[child, MASS]
                m += mc
                mx += mc * nodes[child, COM_X]
                my += mc * nodes[child, COM_Y]
        else:
            j = links[node, HEAD]
            while j >= 0:
                m += ms[j]
                mx += ms[j] * xs[j]
                my += ms[j] * ys[j]
                j = next_in_leaf[j]
        if m > 0:
            nodes[node, MASS] = m
            nodes[node, COM_X] = mx / m
            nodes[node, COM_Y] = my / m

    return nodes[:n_nodes].copy(), links[:n_nodes].copy(), next_in_leaf


@njit(nogil=True, cache=True)
def walk_range(nodes, links, next_in_leaf, xs, ys, ms, G, epsilon, theta, start, stop, out):
    """Fill out[start:stop] with the acceleration on each particle.

    A node is treated as a point mass at its centre of mass when
    size / distance < theta and its region does not contain the particle;
    leaves are always summed particle by particle, skipping the particle
    itself.
    """
    stack = np.empty(4 * (MAX_DEPTH + 2), dtype=np.int64)
    for i in range(start, stop):
        xi = xs[i]
        yi = ys[i]
        ax = 0.0
        ay = 0.0
        stack[0] = 0
        top = 1
        while top > 0:
            top -= 1
            node = stack[top]
            if nodes[node, MASS] == 0.0:
                continue
            first = links[node, FIRST_CHILD]
            if first < 0:
                j = links[node, HEAD]
                while j >= 0:
                    if j != i:
                        dx = xs[j] - xi
                        dy = ys[j] - yi
                        r = math.sqrt(dx * dx + dy * dy)
                        if r > 0.0:
                            rc = r if r > epsilon else epsilon
                            f = G * ms[j] / (rc * rc * r)
                            ax += f * dx
                            ay += f * dy
                    j = next_in_leaf[j]
                continue
            size = nodes[node, SIZE]
            half = size / 2
            inside = abs(xi - nodes[node, CX]) <= half and abs(yi - nodes[node, CY]) <= half
            dx = nodes[node, COM_X] - xi
            dy = nodes[node, COM_Y] - yi
            d = math.sqrt(dx * dx + dy * dy)
            if not inside and d > 0.0 and size / d < theta:
                rc = d if d > epsilon else epsilon
                f = G * nodes[node, MASS] / (rc * rc * d)
                ax += f * dx
                ay += f * dy
            else:
                stack[top] = first + 3
                stack[top + 1] = first + 2
                stack[top + 2] = first + 1
                stack[top + 3] = first
                top += 4
        out[i, 0] = ax
        out[i, 1] = ay


class QuadTree:
    """Quadtree over a fixed set of points, built once and then read-only."""

    __slots__ = ("nodes", "links", "next_in_leaf", "xs", "ys", "ms")

    def __init__(self, positions: np.ndarray, masses: np.ndarray):
        self.xs = np.array(positions[:, 0], dtype=np.float64)
        self.ys = np.array(positions[:, 1], dtype=np.float64)
        self.ms = np.array(masses, dtype=np.float64)
        self.nodes, self.links, self.next_in_leaf = build_arena(self.xs, self.ys, self.ms)

    def __len__(self) -> int:
        return self.nodes.shape[0]

    @property
    def mass(self) -> np.ndarray:
        return self.nodes[:, MASS]

    @property
    def center_of_mass(self) -> np.ndarray:
        return self.nodes[:, COM_X:COM_Y + 1]

    @property
    def first_child(self) -> np.ndarray:
        return self.links[:, FIRST_CHILD]

    def leaf_members(self, node: int):
        """Particle indices stored in a leaf's bucket."""
        members = []
        j = self.links[node, HEAD]
        while j >= 0:
            members.append(int(j))
            j = self.next_in_leaf[j]
        return members

    def fill(self, start: int, stop: int, out: np.ndarray, G: float, epsilon: float, theta: float):
        walk_range(
            self.nodes, self.links, self.next_in_leaf, self.xs, self.ys, self.ms,
            G, epsilon, theta, start, stop, out,
        )

    def acceleration_on(self, i: int, G: float, epsilon: float, theta: float):
        """Net acceleration (ax, ay) on particle i."""
        out = np.zeros((len(self.xs), 2))
        self.fill(i, i + 1, out, G, epsilon, theta)
        return float(out[i, 0]), float(out[i, 1])


class BarnesHut(ForceAlgorithm):
    """Approximate forces by aggregating distant clusters of particles.

    theta controls the trade-off: 0 opens every node (exact, like
    BruteForce), larger values approximate more aggressively. A node
    whose region contains the particle being evaluated is always opened,
    so a particle never feels its own mass whatever theta is.
    """

    def __init__(
        self,
        G: float = DEFAULT_G,
        epsilon: float = DEFAULT_EPSILON,
        theta: float = DEFAULT_THETA,
        num_workers: int = 1,
    ):
        super().__init__(G=G, epsilon=epsilon, num_workers=num_workers)
        if theta < 0:
            raise ValueError(f"theta must be non-negative, got {theta}")
        self.theta = float(theta)

    @property
    def name(self) -> str:
        return "barnes_hut"

    def build_tree(self, positions: np.ndarray, masses: np.ndarray) -> QuadTree:
        return QuadTree(positions, masses)

    def _compute(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        tree = self.build_tree(positions, masses)
        G, epsilon, theta = self.G, self.epsilon, self.theta

        def fill(start: int, stop: int, out: np.ndarray):
            tree.fill(start, stop, out, G, epsilon, theta)

        return run_sharded(fill, positions.shape[0], self.num_workers)

    def __repr__(self) -> str:
        return (
            f"BarnesHut(G={self.G}, epsilon={self.epsilon}, theta={self.theta}, "
            f"num_workers={self.num_workers})"
        )
