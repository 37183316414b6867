"""
Model description text for the external sampler.

The program is written in the JAGS/BUGS grammar: a likelihood loop over
observations, followed by one prior line per free parameter.

    y[i]     ~ dt(mu[x[i]], 1/sigma[x[i]]^2, nu)
    mu[j]    ~ dnorm(muM[j], 1/muSD[j]^2)
    sigma[j] ~ dgamma(sigmaSh[j], sigmaRa[j])
    nu       ~ dgamma(nuSh, nuRa)

JAGS parameterises dt and dnorm by precision, hence the 1/scale^2 terms.
"""

import contextlib
import logging
import tempfile
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

MODEL_FILENAME = "model.txt"


def model_text(n_groups: int = 2) -> str:
    """
    Probabilistic program for the robust n-group model.

    Parameters
    ----------
    n_groups : int
        Number of groups. Default 2.

    Returns
    -------
    text : str
        Model description in JAGS grammar.
    """
    if n_groups < 2:
        raise ValueError(f"n_groups must be >= 2. Got {n_groups}")

    lines = [
        "model {",
        "  for ( i in 1:Ntotal ) {",
        "    y[i] ~ dt( mu[x[i]] , 1/sigma[x[i]]^2 , nu )",
        "  }",
    ]
    for j in range(1, n_groups + 1):
        lines.append(f"  mu[{j}] ~ dnorm( muM[{j}] , 1/muSD[{j}]^2 )")
        lines.append(f"  sigma[{j}] ~ dgamma( sigmaSh[{j}] , sigmaRa[{j}] )")
    lines.append("  nu ~ dgamma( nuSh , nuRa )")
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_model_file(text: str, directory: Union[str, Path], filename: str = MODEL_FILENAME) -> Path:
    """
    Write the model description into directory.

    Failure to write is fatal; OSError propagates to the caller.
    """
    path = Path(directory) / filename
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)
    logger.debug("Wrote model description to %s", path)
    return path


@contextlib.contextmanager
def model_file(text: str) -> Iterator[Path]:
    """Model description in a temporary directory removed on exit."""
    with tempfile.TemporaryDirectory(prefix="bayes_ttest_") as tmpdir:
        yield write_model_file(text, tmpdir)
