"""Exceptions raised by the t-test pipeline."""


class PriorSpecificationError(ValueError):
    """Prior parameters cannot define a valid distribution (e.g. SD <= 0)."""


class ChainStructureError(ValueError):
    """Raw sampler output is inconsistent across chains or parameters."""


class SamplerError(RuntimeError):
    """The external sampler failed or returned unusable output."""
