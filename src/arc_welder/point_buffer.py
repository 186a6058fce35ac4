"""Point buffer owned by the shape accumulator."""

from typing import List, Sequence

import numpy as np

from arc_welder.models.point import SampledPoint


def positions(points: Sequence[SampledPoint]) -> np.ndarray:
    """Positions of the points as an (n, 3) array of x, y, z."""
    return np.array([(p.x, p.y, p.z) for p in points], dtype=float).reshape(-1, 3)


class PointBuffer:
    """
    Ordered, appendable buffer of sampled points.

    Only the most recent append can be undone, which gives the accumulator
    try/fail/undo semantics without snapshotting the whole buffer.
    """

    def __init__(self, capacity: int) -> None:
        """
        Initialize point buffer.

        Args:
            capacity: Maximum number of points the buffer may hold

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self._capacity = capacity
        self._points: List[SampledPoint] = []

    @property
    def capacity(self) -> int:
        """Get the configured capacity."""
        return self._capacity

    def append(self, point: SampledPoint) -> None:
        """
        Append a point to the buffer.

        Raises:
            OverflowError: If the buffer is already full
        """
        if self.is_full():
            raise OverflowError(f"point buffer is full ({self._capacity} points)")
        self._points.append(point)

    def remove_last(self) -> SampledPoint:
        """
        Undo the most recent append.

        Returns:
            The removed point

        Raises:
            IndexError: If the buffer is empty
        """
        if not self._points:
            raise IndexError("remove_last from empty point buffer")
        return self._points.pop()

    def count(self) -> int:
        return len(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> SampledPoint:
        return self._points[index]

    def get_points(self) -> List[SampledPoint]:
        """
        Get the buffered points.

        Returns:
            New list of points in path order
        """
        return list(self._points)

    def is_full(self) -> bool:
        """Check if buffer has reached capacity."""
        return len(self._points) >= self._capacity

    def clear(self) -> None:
        """Remove all points from the buffer."""
        self._points.clear()
