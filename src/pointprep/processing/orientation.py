"""Consistent normal orientation by propagation along a minimum spanning tree.

Normals estimated by PCA have an arbitrary sign. Orientation turns them
into one consistent field:

    1. Build the Riemannian graph: every point is connected to its k
       nearest neighbors, and each edge is weighted by how much the two
       normals disagree (``1 - |n_i . n_j|`` by default), so parallel
       normals are cheap to cross and perpendicular ones expensive.
    2. Extract the minimum spanning forest (Kruskal, ties broken by the
       edge's ``(i, j)`` index pair).
    3. In each connected component, take a root whose current sign is
       trusted, then walk the tree breadth-first and flip every child whose
       normal points away from its parent's.

Afterwards every tree edge joins two normals with a non-negative dot
product. Components that the neighbor graph cannot connect are oriented
independently, each from its own root.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import breadth_first_order, connected_components

from pointprep.errors import PreconditionError, require_k, require_points
from pointprep.geometry.spatial import SpatialIndex

logger = logging.getLogger(__name__)

WeightFunction = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], np.ndarray]


def _unsigned_weight(ni, nj, pi, pj):
    return 1.0 - np.abs(np.einsum("ij,ij->i", ni, nj))


def _signed_weight(ni, nj, pi, pj):
    return 1.0 - np.einsum("ij,ij->i", ni, nj)


def _euclidean_weight(ni, nj, pi, pj):
    return np.linalg.norm(pi - pj, axis=1)


# Edge weight policies, keyed by the name used in filter options.
# Each takes (normals_i, normals_j, points_i, points_j) per edge.
EDGE_WEIGHTS: dict[str, WeightFunction] = {
    "unsigned": _unsigned_weight,
    "signed": _signed_weight,
    "euclidean": _euclidean_weight,
}

ROOT_POLICIES = ("max_z", "first")


@dataclass
class NeighborGraph:
    """Undirected weighted graph over point indices.

    Edges are stored once with ``i < j``, sorted by ``(i, j)``.
    """

    num_nodes: int
    i: np.ndarray
    j: np.ndarray
    weight: np.ndarray

    @property
    def num_edges(self) -> int:
        return len(self.i)

    def adjacency(self):
        """Symmetric CSR adjacency matrix with unit entries for every edge.

        Unit entries keep zero-weight edges visible to scipy's graph routines,
        which treat stored zeros as missing edges.
        """
        n = self.num_nodes
        ones = np.ones(2 * self.num_edges, dtype=np.int8)
        rows = np.concatenate([self.i, self.j])
        cols = np.concatenate([self.j, self.i])
        return coo_matrix((ones, (rows, cols)), shape=(n, n)).tocsr()

    def components(self) -> tuple[int, np.ndarray]:
        """Number of connected components and the label of every node."""
        if self.num_nodes == 0:
            return 0, np.zeros(0, dtype=np.int64)
        return connected_components(self.adjacency(), directed=False, return_labels=True)


@dataclass
class SpanningTree(NeighborGraph):
    """Minimum spanning forest: a NeighborGraph without cycles."""

    @property
    def total_weight(self) -> float:
        return float(self.weight.sum())


@dataclass
class OrientationResult:
    """Outcome of ``orient_normals``.

    Attributes:
        normals: (N, 3) normals with consistent signs.
        oriented: (N,) bool, True for every point reached from a root.
        tree: The spanning forest the signs were propagated along.
        roots: Root point index of each component, in component label order.
        labels: (N,) component label of each point.
    """

    normals: np.ndarray
    oriented: np.ndarray
    tree: SpanningTree
    roots: np.ndarray
    labels: np.ndarray

    @property
    def num_components(self) -> int:
        return len(self.roots)

    @property
    def num_unoriented(self) -> int:
        return int(np.count_nonzero(~self.oriented))

    @property
    def num_outside_largest(self) -> int:
        """Points that are not in the largest connected component."""
        if len(self.labels) == 0:
            return 0
        return int(len(self.labels) - np.bincount(self.labels).max())


def build_riemannian_graph(
    points: np.ndarray,
    normals: np.ndarray,
    k: int,
    index: SpatialIndex | None = None,
    weight: str = "unsigned",
) -> NeighborGraph:
    """Connect each point to its k nearest other points.

    An edge found from both of its ends is kept once.

    Args:
        points: (N, 3) positions.
        normals: (N, 3) normals, any sign.
        k: Neighbors per point, at least 1.
        index: Prebuilt index over ``points``; built here if omitted.
        weight: Name of an ``EDGE_WEIGHTS`` policy.
    """
    if weight not in EDGE_WEIGHTS:
        raise ValueError(f"Unknown edge weight '{weight}'. Use: {', '.join(EDGE_WEIGHTS)}")
    require_k(k, minimum=1)
    pts, nrm = _check_inputs(points, normals)
    n = len(pts)
    if index is None:
        index = SpatialIndex(pts)
    elif len(index) != n:
        raise ValueError(f"Index holds {len(index)} points, expected {n}")

    if n == 1:
        empty = np.zeros(0, dtype=np.int64)
        return NeighborGraph(1, empty, empty.copy(), np.zeros(0, dtype=np.float64))

    _, neighbors = index.query(pts, k + 1)
    rows = np.broadcast_to(np.arange(n)[:, None], neighbors.shape)
    others = neighbors != rows
    # Keep the first k neighbors that are not the point itself
    keep = others & (np.cumsum(others, axis=1) <= k)

    a = rows[keep]
    b = neighbors[keep]
    pairs = np.unique(np.column_stack([np.minimum(a, b), np.maximum(a, b)]), axis=0)
    i, j = pairs[:, 0], pairs[:, 1]
    w = EDGE_WEIGHTS[weight](nrm[i], nrm[j], pts[i], pts[j])
    return NeighborGraph(n, i, j, np.asarray(w, dtype=np.float64))


def minimum_spanning_tree(graph: NeighborGraph) -> SpanningTree:
    """Kruskal's algorithm over the graph's edges.

    Edges are considered in order of (weight, i, j), so equal weights are
    resolved by index and the result is reproducible.
    """
    order = np.lexsort((graph.j, graph.i, graph.weight))
    parent = list(range(graph.num_nodes))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    chosen: list[int] = []
    needed = graph.num_nodes - 1
    for e, a, b in zip(order.tolist(), graph.i[order].tolist(), graph.j[order].tolist()):
        ra, rb = find(a), find(b)
        if ra == rb:
            continue
        if ra < rb:
            parent[rb] = ra
        else:
            parent[ra] = rb
        chosen.append(e)
        if len(chosen) == needed:
            break

    chosen_idx = np.sort(np.asarray(chosen, dtype=np.int64))
    return SpanningTree(
        graph.num_nodes,
        graph.i[chosen_idx],
        graph.j[chosen_idx],
        graph.weight[chosen_idx],
    )


def select_roots(points: np.ndarray, labels: np.ndarray, policy: str = "max_z") -> np.ndarray:
    """Pick one root per component.

    ``"max_z"`` takes the point with the largest Z, ``"first"`` the lowest
    index. Ties go to the lowest index.

    Returns:
        Root index of each component, in label order. Labels must be
        ``0..C-1`` with every label used, as from ``connected_components``.
    """
    if policy not in ROOT_POLICIES:
        raise ValueError(f"Unknown root policy '{policy}'. Use: {', '.join(ROOT_POLICIES)}")
    labels = np.asarray(labels, dtype=np.int64)
    if len(labels) == 0:
        return np.zeros(0, dtype=np.int64)
    idx = np.arange(len(labels))
    if policy == "max_z":
        order = np.lexsort((idx, -np.asarray(points)[:, 2], labels))
    else:
        order = np.lexsort((idx, labels))
    # First entry of each label run in the sorted order
    sorted_labels = labels[order]
    first = np.ones(len(order), dtype=bool)
    first[1:] = sorted_labels[1:] != sorted_labels[:-1]
    return order[first]


def propagate_orientation(
    normals: np.ndarray, tree: SpanningTree, roots: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Flip normals so each agrees in sign with its parent in the tree.

    All components are walked in one breadth-first traversal from a virtual
    node joined to every root.

    Returns:
        Tuple of (new normals, oriented flags).
    """
    result = np.array(normals, dtype=np.float64, copy=True)
    n = len(result)
    oriented = np.zeros(n, dtype=bool)
    roots = np.asarray(roots, dtype=np.int64)
    if len(roots) == 0:
        return result, oriented

    rows = np.concatenate([tree.i, tree.j, np.full(len(roots), n), roots])
    cols = np.concatenate([tree.j, tree.i, roots, np.full(len(roots), n)])
    ones = np.ones(len(rows), dtype=np.int8)
    adjacency = coo_matrix((ones, (rows, cols)), shape=(n + 1, n + 1)).tocsr()

    order, predecessors = breadth_first_order(
        adjacency, n, directed=False, return_predecessors=True
    )
    nodes = order[1:]
    parents = predecessors[nodes]
    oriented[nodes] = True

    # Sign of each node relative to the unflipped input; roots keep theirs
    agrees = np.ones(len(nodes), dtype=bool)
    child = parents != n
    agrees[child] = np.einsum(
        "ij,ij->i", result[nodes[child]], result[parents[child]]
    ) >= 0
    sign = [1.0] * (n + 1)
    # Breadth-first order visits every parent before its children
    for node, parent, same in zip(nodes.tolist(), parents.tolist(), agrees.tolist()):
        sign[node] = sign[parent] if same else -sign[parent]

    result *= np.asarray(sign[:n])[:, None]
    return result, oriented


def orient_normals(
    points: np.ndarray,
    normals: np.ndarray,
    k: int = 10,
    index: SpatialIndex | None = None,
    weight: str = "unsigned",
    root: str = "max_z",
) -> OrientationResult:
    """Orient normals consistently across the point cloud.

    Args:
        points: (N, 3) positions.
        normals: (N, 3) unoriented normals, e.g. from ``estimate_normals``.
        k: Neighbors per point in the Riemannian graph.
        index: Prebuilt index over ``points``, e.g. the one used to estimate
            the normals.
        weight: Edge weight policy, see ``EDGE_WEIGHTS``.
        root: Root policy, see ``select_roots``. The root keeps its sign.

    Returns:
        OrientationResult. The input arrays are not modified.
    """
    pts, nrm = _check_inputs(points, normals)
    logger.info("Orienting %d normals using a minimum spanning tree (k=%d)", len(pts), k)

    graph = build_riemannian_graph(pts, nrm, k, index=index, weight=weight)
    tree = minimum_spanning_tree(graph)
    n_components, labels = tree.components()
    roots = select_roots(pts, labels, root)
    oriented_normals, oriented = propagate_orientation(nrm, tree, roots)

    result = OrientationResult(
        normals=oriented_normals,
        oriented=oriented,
        tree=tree,
        roots=roots,
        labels=np.asarray(labels, dtype=np.int64),
    )
    if n_components > 1:
        logger.warning(
            "Neighbor graph has %d connected components (%d points outside the "
            "largest); each was oriented from its own root",
            n_components, result.num_outside_largest,
        )
    return result


def _check_inputs(points: np.ndarray, normals: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    nrm = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    require_points(len(pts))
    if len(nrm) != len(pts):
        raise PreconditionError(
            f"Got {len(nrm)} normals for {len(pts)} points"
        )
    return pts, nrm
