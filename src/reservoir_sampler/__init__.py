"""reservoir-sampler: fixed-capacity streaming reservoir sampling with key dedup.

Maintains a uniformly random sample of at most ``capacity`` rows across a
stream of batches using Algorithm R. Rows whose object id is already in the
reservoir are ignored rather than resampled.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("reservoir-sampler")
except PackageNotFoundError:
    __version__ = "0.0.0"

from reservoir_sampler.config import ReservoirConfig, resolve_config, validate_overrides
from reservoir_sampler.exceptions import (
    ConfigurationError,
    InternalConsistencyFault,
    RandomSourceError,
    ReservedObjectIdError,
    ReservoirSamplerError,
    ShapeMismatchError,
    SizeMismatchError,
)
from reservoir_sampler.index import UNASSIGNED, ObjectIndex
from reservoir_sampler.ingest import BatchIngest, BatchResult
from reservoir_sampler.sampler import ReservoirSampler
from reservoir_sampler.state import ReservoirState

__all__ = [
    "UNASSIGNED",
    "BatchIngest",
    "BatchResult",
    "ConfigurationError",
    "InternalConsistencyFault",
    "ObjectIndex",
    "RandomSourceError",
    "ReservedObjectIdError",
    "ReservoirConfig",
    "ReservoirSampler",
    "ReservoirSamplerError",
    "ReservoirState",
    "ShapeMismatchError",
    "SizeMismatchError",
    "__version__",
    "resolve_config",
    "validate_overrides",
]
