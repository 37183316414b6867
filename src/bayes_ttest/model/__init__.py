"""
Model assembly: observations, configuration payload and model description.

- ObservationSet: measurements with parallel 1-based group labels
- ConfigurationPayload: read-only hyperparameter/data mapping
- model_text / model_file: model description for the external sampler
- ModelBuilder: assembles payload and text, builds the PyMC equivalent
"""

from bayes_ttest.model.builder import ModelBuilder, build_pymc_model, initial_values
from bayes_ttest.model.data import ObservationSet
from bayes_ttest.model.payload import ConfigurationPayload
from bayes_ttest.model.text import model_file, model_text, write_model_file

__all__ = [
    "ObservationSet",
    "ConfigurationPayload",
    "ModelBuilder",
    "build_pymc_model",
    "initial_values",
    "model_text",
    "model_file",
    "write_model_file",
]
