# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Numeric core: signal transforms, tail segmentation and GAF encoding."""

from .config import PipelineConfig  # noqa: F401
from .gaf import GAFEncoder  # noqa: F401
from .pipeline import check_classifier, classify_results, process_read, run_batch  # noqa: F401
from .records import Chunk, GAFMatrix, ReadResult, ReadSignal, SegmentedSignal, TailBoundary  # noqa: F401
