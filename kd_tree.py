from typing import Optional, List, Sequence, Iterator, Tuple
from operator import attrgetter
import numpy as np

from vehicle_position import VehiclePosition, LATITUDE_AXIS, LONGITUDE_AXIS

'''
Two dimensional kd-tree over vehicle positions. Built once from a list of
positions by median splits on alternating axes (latitude, then longitude),
then queried for the nearest position to a coordinate.
'''

DIMENSIONS = 2
PIVOT_STRATEGIES = ("random", "last")

AXIS_COORDINATE = {
    LATITUDE_AXIS: attrgetter('latitude'),
    LONGITUDE_AXIS: attrgetter('longitude'),
}


def distance(point1: np.ndarray, point2: np.ndarray) -> float:
    return np.linalg.norm(point1 - point2)


def partition(positions: List[VehiclePosition], low: int, high: int, axis: int) -> int:
    """
    Lomuto partition of positions[low:high + 1] around the last element.
    Positions strictly below the pivot on the axis end up to its left, the
    rest to its right. Returns the final index of the pivot.
    """
    coordinate = AXIS_COORDINATE[axis]
    pivot_value = coordinate(positions[high])
    i = low
    for j in range(low, high):
        if coordinate(positions[j]) < pivot_value:
            positions[i], positions[j] = positions[j], positions[i]
            i += 1
    positions[i], positions[high] = positions[high], positions[i]
    return i


def partition_three_way(positions: List[VehiclePosition], low: int, high: int, axis: int) -> Tuple[int, int]:
    """
    Splits positions[low:high + 1] into runs below, equal to and above the
    last element on the axis. Returns (lt, gt), the bounds of the equal run.
    """
    coordinate = AXIS_COORDINATE[axis]
    pivot_value = coordinate(positions[high])
    lt, i, gt = low, low, high
    while i <= gt:
        value = coordinate(positions[i])
        if value < pivot_value:
            positions[lt], positions[i] = positions[i], positions[lt]
            lt += 1
            i += 1
        elif value > pivot_value:
            positions[i], positions[gt] = positions[gt], positions[i]
            gt -= 1
        else:
            i += 1
    return lt, gt


def quickselect(positions: List[VehiclePosition], low: int, high: int, k: int, axis: int,
                rng: Optional[np.random.Generator] = None) -> int:
    """
    Reorders positions[low:high + 1] in place so that index k holds the
    element it would hold if the range were sorted on the axis, and returns k.

    Without a generator the pivot is always the last element of the range
    and the range is split with `partition`. With one, a random element is
    swapped into the last slot first and the range is split three ways, so
    long runs of equal coordinates are settled in a single pass.
    """
    while low < high:
        if rng is None:
            pivot_index = partition(positions, low, high, axis)
            lt, gt = pivot_index, pivot_index
        else:
            chosen = int(rng.integers(low, high + 1))
            positions[chosen], positions[high] = positions[high], positions[chosen]
            lt, gt = partition_three_way(positions, low, high, axis)
        if k < lt:
            high = lt - 1
        elif k > gt:
            low = gt + 1
        else:
            return k
    return low


class KDTreeNode:
    __slots__ = ("position", "point", "axis", "left", "right")

    def __init__(self,
                 position: VehiclePosition,
                 axis: int,
                 left: Optional['KDTreeNode'] = None,
                 right: Optional['KDTreeNode'] = None
                 ):
        self.position = position
        self.point = position.point
        self.axis = axis
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class KDTree:
    def __init__(self, root: Optional[KDTreeNode] = None, size: int = 0):
        self.root = root
        self.size = size

    @staticmethod
    def build(positions: Sequence[VehiclePosition], pivot: str = "random", seed: Optional[int] = None) -> 'KDTree':
        if pivot not in PIVOT_STRATEGIES:
            raise ValueError(f"Unknown pivot strategy '{pivot}', expected one of {PIVOT_STRATEGIES}")

        # Private copy, quickselect reorders it in place
        working = list(positions)
        for position in working:
            if not position.is_finite():
                raise ValueError(f"Vehicle {position.vehicle_id} has non-finite coordinates "
                                 f"({position.latitude}, {position.longitude})")
        if not working:
            return KDTree()

        rng = np.random.default_rng(seed) if pivot == "random" else None

        def _build_rec(low, high, depth):
            if low > high:
                return None

            axis = depth % DIMENSIONS
            median_index = quickselect(working, low, high, (low + high) // 2, axis, rng)

            return KDTreeNode(
                working[median_index],
                axis,
                left=_build_rec(low, median_index - 1, depth + 1),
                right=_build_rec(median_index + 1, high, depth + 1),
            )

        return KDTree(_build_rec(0, len(working) - 1, 0), len(working))

    def nearest_neighbor(self, query_point) -> Optional[KDTreeNode]:
        return self._nearest(query_point)[0]

    def nearest_with_distance(self, query_point) -> Tuple[Optional[VehiclePosition], float]:
        node, best_distance = self._nearest(query_point)
        if node is None:
            return None, best_distance
        return node.position, best_distance

    def find_nearest(self, latitude: float, longitude: float) -> Optional[VehiclePosition]:
        node = self.nearest_neighbor((latitude, longitude))
        return node.position if node is not None else None

    def _nearest(self, query_point) -> Tuple[Optional[KDTreeNode], float]:
        query_point = np.asarray(query_point, dtype=np.float64)
        if query_point.shape != (DIMENSIONS,):
            raise ValueError(f"Query must be a (latitude, longitude) pair, got shape {query_point.shape}")
        if not np.all(np.isfinite(query_point)):
            raise ValueError(f"Query coordinates must be finite, got {tuple(query_point)}")

        def _nearest_rec(node):
            if node is None:
                return None, np.inf

            axis = node.axis
            splitting_plane_distance = query_point[axis] - node.point[axis]
            if splitting_plane_distance < 0:
                near, far = node.left, node.right
            else:
                near, far = node.right, node.left

            # Closest on the query's side of the split
            best_node, best_distance = _nearest_rec(near)

            this_distance = distance(query_point, node.point)
            if this_distance < best_distance:
                best_node, best_distance = node, this_distance

            # The far side can only help if the split is closer than the best so far
            if abs(splitting_plane_distance) < best_distance:
                far_node, far_distance = _nearest_rec(far)
                if far_distance < best_distance:
                    best_node, best_distance = far_node, far_distance

            return best_node, best_distance

        return _nearest_rec(self.root)

    def __len__(self):
        return self.size

    def __iter__(self) -> Iterator[VehiclePosition]:
        def _inorder(node):
            if node is None:
                return
            yield from _inorder(node.left)
            yield node.position
            yield from _inorder(node.right)
        return _inorder(self.root)

    def depth(self) -> int:
        def _depth(node):
            if node is None:
                return 0
            return 1 + max(_depth(node.left), _depth(node.right))
        return _depth(self.root)

    def check_invariant(self) -> bool:
        '''
        True if every node splits its subtrees correctly: everything on the
        left is <= the node on its axis, everything on the right is >=.
        '''
        def _bounds(node):
            # Returns (mins, maxs) over the subtree, or None if the split is broken somewhere below
            if node is None:
                return np.full(DIMENSIONS, np.inf), np.full(DIMENSIONS, -np.inf)
            left = _bounds(node.left)
            right = _bounds(node.right)
            if left is None or right is None:
                return None
            value = node.point[node.axis]
            if left[1][node.axis] > value or right[0][node.axis] < value:
                return None
            mins = np.minimum(np.minimum(left[0], right[0]), node.point)
            maxs = np.maximum(np.maximum(left[1], right[1]), node.point)
            return mins, maxs

        return _bounds(self.root) is not None
