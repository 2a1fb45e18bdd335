# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Exception hierarchy for Ninetails.

``ConfigurationError`` is fatal and raised before any read is touched.
Every ``ReadError`` is local to one read (or one chunk): the pipeline logs it
with the identifying key and leaves the unit out of the output.
"""


class NinetailsError(Exception):
    """Base class for all Ninetails errors."""


class ConfigurationError(NinetailsError):
    """Invalid or missing run configuration."""


class ReadError(NinetailsError):
    """Recoverable failure tied to a single read or chunk.

    Args:
        message: Human readable description.
        key: Read id or chunk name the failure belongs to.
    """

    def __init__(self, message, key=None):
        super().__init__(message)
        self.key = key

    def __str__(self):
        msg = super().__str__()
        if self.key is not None:
            return f'{self.key}: {msg}'
        return msg


class InvalidSignalError(ReadError):
    """Signal is empty, non-numeric or contains missing values."""


class BoundaryInconsistencyError(ReadError):
    """Tail boundaries are not monotonic or the tail has no samples."""


class DegenerateSignalError(ReadError):
    """Chunk has zero variance, so min-max normalisation is undefined."""


class AlignmentOverflowError(ReadError):
    """Move array times stride overshoots the raw signal beyond tolerance."""


class ReadNotFoundError(ReadError):
    """The read loader has no data for the requested read id."""
