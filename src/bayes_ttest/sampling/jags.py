"""
Out-of-process sampler backend running the JAGS command-line program.

Files written next to the model description:
- data.R: payload in R dump format
- initsN.R: initial values and RNG settings of chain N
- jags.cmd: command script (compile, adapt, burn in, monitor, coda)

JAGS writes CODAindex.txt ("name first last" line ranges) and
CODAchainN.txt ("iteration value" lines), which are read back into raw
chain-major output with scalar names such as mu[1].
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple, Union

import numpy as np

from bayes_ttest.exceptions import SamplerError
from bayes_ttest.sampling.base import RawChains
from bayes_ttest.sampling.options import SamplerOptions

logger = logging.getLogger(__name__)

RNG_NAMES = (
    "base::Wichmann-Hill",
    "base::Marsaglia-Multicarry",
    "base::Super-Duper",
    "base::Mersenne-Twister",
)


def _format_value(value) -> str:
    arr = np.asarray(value)
    if arr.dtype.kind in "US":
        return f'"{arr.item()}"'
    if arr.dtype.kind in "iub":
        items = [str(int(v)) for v in arr.ravel()]
    else:
        items = [repr(float(v)) for v in arr.ravel()]
    if arr.ndim == 0:
        return items[0]
    return "c(" + ", ".join(items) + ")"


def format_rdump(values: Mapping[str, object]) -> str:
    """Values in R dump format, one assignment per name."""
    lines = []
    for name, value in values.items():
        lines.append(f'"{name}" <- {_format_value(value)}')
    return "\n".join(lines) + "\n"


def write_rdump(values: Mapping[str, object], path: Union[str, Path]) -> Path:
    """Write values in R dump format to path; OSError propagates."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(format_rdump(values))
    return path


def jags_script(
    model_path: Path,
    data_path: Path,
    init_paths: Sequence[Path],
    options: SamplerOptions,
) -> str:
    """Command script for the JAGS executable."""
    lines = [
        f'model in "{model_path}"',
        f'data in "{data_path}"',
        f"compile, nchains({options.n_chains})",
    ]
    for chain, path in enumerate(init_paths, start=1):
        lines.append(f'parameters in "{path}", chain({chain})')
    lines.append("initialize")
    if options.adapt_steps > 0:
        lines.append(f"adapt {options.adapt_steps}")
    if options.burn_in > 0:
        lines.append(f"update {options.burn_in}")
    for name in options.monitor:
        lines.append(f"monitor {name}, thin({options.thin})")
    lines.append(f"update {options.draws_per_chain}")
    lines.append("coda *, stem(CODA)")
    lines.append("exit")
    return "\n".join(lines) + "\n"


def read_coda(index_path: Union[str, Path], chain_paths: Sequence[Union[str, Path]]) -> RawChains:
    """
    Read CODA output files into raw chain-major output.

    Parameters
    ----------
    index_path : str or Path
        CODA index file, one "name first last" line per parameter.
    chain_paths : Sequence[str or Path]
        One CODA chain file per chain.

    Returns
    -------
    raw : RawChains
        One mapping per chain from parameter name to 1-D draws.

    Raises
    ------
    SamplerError
        If a file is missing or malformed.
    """
    try:
        entries: List[Tuple[str, int, int]] = []
        with open(index_path, encoding="utf-8") as fh:
            for line in fh:
                parts = line.split()
                if not parts:
                    continue
                if len(parts) != 3:
                    raise SamplerError(f"Malformed CODA index line: {line.strip()!r}")
                entries.append((parts[0], int(parts[1]), int(parts[2])))

        if not entries:
            raise SamplerError(f"CODA index {index_path} lists no parameters")

        raw = []
        for path in chain_paths:
            table = np.loadtxt(path, ndmin=2)
            if table.shape[1] != 2:
                raise SamplerError(f"CODA chain file {path} must have 2 columns")
            values = table[:, 1]

            chain: Dict[str, np.ndarray] = {}
            for name, first, last in entries:
                if first < 1 or last < first or last > len(values):
                    raise SamplerError(
                        f"CODA range {first}-{last} for {name} outside {path} ({len(values)} lines)"
                    )
                chain[name] = values[first - 1:last]
            raw.append(chain)
    except OSError as exc:
        raise SamplerError(f"Cannot read CODA output: {exc}") from exc
    except ValueError as exc:
        raise SamplerError(f"Malformed CODA output: {exc}") from exc

    return raw


class JagsSampler:
    """
    JAGS command-line backend.

    Chains run sequentially inside one JAGS process; the parallel option
    has no effect here.
    """

    def __init__(self, executable: str = "jags") -> None:
        self.executable = executable

    def run(
        self,
        payload: Mapping[str, object],
        model_path: Path,
        inits: Sequence[Mapping[str, object]],
        options: SamplerOptions,
    ) -> RawChains:
        """Run JAGS in the directory holding the model description."""
        model_path = Path(model_path).resolve()
        workdir = model_path.parent

        data_path = write_rdump(payload, workdir / "data.R")

        seeds = np.random.default_rng(options.random_seed).integers(1, 2**31 - 1, size=options.n_chains)
        init_paths = []
        for chain in range(options.n_chains):
            record = dict(inits[chain]) if inits else {}
            record[".RNG.name"] = RNG_NAMES[chain % len(RNG_NAMES)]
            record[".RNG.seed"] = int(seeds[chain])
            init_paths.append(write_rdump(record, workdir / f"inits{chain + 1}.R"))

        script_path = workdir / "jags.cmd"
        with open(script_path, "w", encoding="utf-8") as fh:
            fh.write(jags_script(model_path, data_path, init_paths, options))

        if options.parallel:
            logger.debug("JAGS backend runs chains sequentially; ignoring parallel=True")

        try:
            completed = subprocess.run(
                [self.executable, str(script_path)],
                cwd=workdir,
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise SamplerError(f"JAGS executable not found: {self.executable}") from exc
        except subprocess.CalledProcessError as exc:
            raise SamplerError(
                f"JAGS failed with exit code {exc.returncode}: {(exc.stderr or '').strip()}"
            ) from exc

        if options.verbosity > 1:
            logger.info("JAGS output:\n%s", completed.stdout)

        return read_coda(
            workdir / "CODAindex.txt",
            [workdir / f"CODAchain{chain + 1}.txt" for chain in range(options.n_chains)],
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"JagsSampler(executable={self.executable!r})"
