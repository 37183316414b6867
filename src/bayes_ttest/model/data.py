"""Observed measurements with 1-based group labels."""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray


class ObservationSet:
    """
    Observations partitioned into groups by a parallel label vector.

    Attributes
    ----------
    y : NDArray[np.float64]
        Observations, shape (n_total,)
    x : NDArray[np.int64]
        Group labels in [1, n_groups], shape (n_total,)
    n_groups : int
        Number of groups
    """

    def __init__(
        self,
        y: ArrayLike,
        x: ArrayLike,
        n_groups: Optional[int] = None,
    ) -> None:
        """
        Initialize observation set.

        Parameters
        ----------
        y : ArrayLike
            Numeric observations.
        x : ArrayLike
            Integer group labels (1-based), same length as y.
        n_groups : int, optional
            Number of groups. If None, the largest label.

        Raises
        ------
        ValueError
            If lengths differ, labels are out of range, a group is empty,
            fewer than 2 groups exist, or observations are not finite.
        """
        y = np.asarray(y, dtype=np.float64)
        x_raw = np.asarray(x)

        if y.ndim != 1 or x_raw.ndim != 1:
            raise ValueError(f"y and x must be 1-D. Got shapes {y.shape} and {x_raw.shape}")
        if y.shape != x_raw.shape:
            raise ValueError(f"y and x must have equal length. Got {len(y)} and {len(x_raw)}")
        if len(y) == 0:
            raise ValueError("Observation set is empty")
        if not np.all(np.isfinite(y)):
            raise ValueError("Observations must be finite")
        if not np.all(np.equal(np.mod(x_raw, 1), 0)):
            raise ValueError(f"Group labels must be integers. Got {x_raw}")

        x = x_raw.astype(np.int64)
        if n_groups is None:
            n_groups = int(x.max())
        if n_groups < 2:
            raise ValueError(f"Need at least 2 groups. Got {n_groups}")
        if not np.all((x >= 1) & (x <= n_groups)):
            raise ValueError(f"Group labels must be in [1, {n_groups}]")

        sizes = np.bincount(x, minlength=n_groups + 1)[1:]
        if np.any(sizes == 0):
            empty = [j + 1 for j in np.flatnonzero(sizes == 0)]
            raise ValueError(f"Groups {empty} have no observations")

        self.y = y
        self.x = x
        self.n_groups = int(n_groups)
        self.y.flags.writeable = False
        self.x.flags.writeable = False

    @classmethod
    def from_groups(cls, *samples: ArrayLike) -> "ObservationSet":
        """Build from one sample per group; group j gets label j (1-based)."""
        if len(samples) < 2:
            raise ValueError(f"Need at least 2 groups. Got {len(samples)}")

        arrays = [np.atleast_1d(np.asarray(s, dtype=np.float64)).ravel() for s in samples]
        y = np.concatenate(arrays)
        x = np.concatenate(
            [np.full(len(a), j, dtype=np.int64) for j, a in enumerate(arrays, start=1)]
        )
        return cls(y, x, n_groups=len(arrays))

    @property
    def n_total(self) -> int:
        return len(self.y)

    @property
    def group_sizes(self) -> Tuple[int, ...]:
        return tuple(int(n) for n in np.bincount(self.x, minlength=self.n_groups + 1)[1:])

    def group(self, j: int) -> NDArray[np.float64]:
        """Observations of group j (1-based)."""
        if not (1 <= j <= self.n_groups):
            raise ValueError(f"group must be in [1, {self.n_groups}]. Got {j}")
        return self.y[self.x == j]

    def __repr__(self) -> str:
        """String representation."""
        return f"ObservationSet(n_total={self.n_total}, group_sizes={self.group_sizes})"
