"""Data loading module for observation and intervention logs."""

from .loaders import (
    InputValidationError,
    load_observations,
    load_interventions,
    load_intervention_names,
    observations_from_frame,
    interventions_from_frame,
    validate_observations,
)

__all__ = [
    "InputValidationError",
    "load_observations",
    "load_interventions",
    "load_intervention_names",
    "observations_from_frame",
    "interventions_from_frame",
    "validate_observations",
]
