# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Input collaborators: read loaders and the tail-boundary table."""

from .boundaries import read_polya_table  # noqa: F401
from .reads import MemoryReadLoader, NpzReadLoader, ReadLoader  # noqa: F401
