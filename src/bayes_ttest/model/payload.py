"""Read-only configuration payload handed to the sampler."""

from collections.abc import Mapping
from typing import Dict, Iterator

import numpy as np

from bayes_ttest.model.data import ObservationSet
from bayes_ttest.priors.spec import PriorSpec

PAYLOAD_KEYS = ("y", "x", "Ntotal", "Ngroups", "muM", "muSD", "sigmaSh", "sigmaRa", "nuSh", "nuRa")


def _freeze(value):
    if isinstance(value, np.ndarray):
        value = value.copy()
        value.flags.writeable = False
        return value
    if isinstance(value, (list, tuple)):
        return _freeze(np.asarray(value))
    return value


class ConfigurationPayload(Mapping):
    """
    Immutable mapping of named hyperparameters and data.

    Arrays are copied and flagged read-only on construction; the mapping
    itself has no mutating methods.
    """

    def __init__(self, values: Dict[str, object]) -> None:
        self._values = {name: _freeze(value) for name, value in values.items()}

    @classmethod
    def from_inputs(cls, observations: ObservationSet, priors: PriorSpec) -> "ConfigurationPayload":
        """
        Transcribe observations and priors into payload form.

        Raises
        ------
        ValueError
            If the prior specification covers a different number of groups.
        """
        if priors.n_groups != observations.n_groups:
            raise ValueError(
                f"Prior specification has {priors.n_groups} groups, "
                f"observations have {observations.n_groups}"
            )

        values: Dict[str, object] = {
            "y": observations.y,
            "x": observations.x,
            "Ntotal": observations.n_total,
            "Ngroups": observations.n_groups,
        }
        values.update(priors.to_hyperparameters())
        return cls(values)

    def __getitem__(self, key: str):
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        """String representation."""
        return f"ConfigurationPayload({sorted(self._values)})"
