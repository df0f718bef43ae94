"""Diagnostic logging subsystem for reservoir-sampler.

Provides immutable per-batch sampling records and a configurable logger
that supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from reservoir_sampler.logging.logger import SamplingLogger
from reservoir_sampler.logging.types import BatchSamplingRecord

__all__ = [
    "BatchSamplingRecord",
    "SamplingLogger",
]
