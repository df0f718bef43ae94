"""Exception hierarchy for reservoir-sampler.

All exceptions derive from ReservoirSamplerError, enabling broad catch
patterns at the application boundary while allowing fine-grained handling
internally. None of these conditions are transient: every one of them
aborts the current ``process`` call.
"""


class ReservoirSamplerError(Exception):
    """Base exception for all reservoir-sampler errors."""


class ConfigurationError(ReservoirSamplerError):
    """The sampler or its state was set up incorrectly.

    Raised for a non-positive capacity, a negative visit count, ids supplied
    to a sampler without key tracking (or missing from one with it), an
    unknown random source, or a restored state whose parts disagree.
    """


class ShapeMismatchError(ReservoirSamplerError):
    """An input does not have the shape the reservoir expects.

    Raised when a batch row shape or element type differs from the
    established reservoir, when the id vector is not 1-D, or when the
    visit count storage is not a scalar.
    """


class SizeMismatchError(ReservoirSamplerError):
    """The id vector length differs from the number of rows in the batch."""


class ReservedObjectIdError(ReservoirSamplerError):
    """An object id equals the sentinel that marks unassigned slots."""


class InternalConsistencyFault(ReservoirSamplerError):
    """A post-condition of the sampler was violated.

    This indicates a bug in the sampler rather than a problem with the
    data: the visit counter did not advance by the expected amount, or the
    position map and slot owners drifted apart.
    """


class RandomSourceError(ReservoirSamplerError):
    """A random source could not produce a draw.

    Raised when a scripted source is exhausted or yields a value outside the
    requested range.
    """
