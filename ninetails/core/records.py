# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Frozen records passed between pipeline stages.

Sample positions are 1-based throughout, matching the coordinates reported
by the tail-boundary source.
"""

from dataclasses import dataclass, field

import numpy as np

from ..errors import BoundaryInconsistencyError


def _frozen_array(values, dtype=None):
    arr = np.array(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class ReadSignal:
    """Raw signal, basecaller moves and channel calibration of one read."""
    read_id: str
    signal: np.ndarray            # raw ADC values
    move: np.ndarray              # 0/1 per basecaller event
    stride: int                   # samples per event
    called_events: int
    digitisation: float = 8192
    offset: float = 0
    range: float = 1
    sampling_rate: float = 3012

    def __post_init__(self):
        object.__setattr__(self, 'signal', _frozen_array(self.signal))
        object.__setattr__(self, 'move', _frozen_array(self.move))

    def __len__(self):
        return len(self.signal)

    def to_picoamps(self, values=None):
        """Rescale raw values (the whole read by default) to picoamperes."""
        raw = self.signal if values is None else np.asarray(values)
        return (raw + self.offset) * (self.range / self.digitisation)

    def duration(self, n_samples):
        """Seconds spanned by *n_samples* at the channel sampling rate."""
        return n_samples / self.sampling_rate


@dataclass(frozen=True)
class TailBoundary:
    """Externally computed segment starts of one read.

    Raises:
        BoundaryInconsistencyError: positions are not non-decreasing.
    """
    read_id: str
    leader_start: int
    adapter_start: int
    polya_start: int
    transcript_start: int

    def __post_init__(self):
        positions = (self.leader_start, self.adapter_start,
                     self.polya_start, self.transcript_start)
        if any(a > b for a, b in zip(positions, positions[1:])):
            raise BoundaryInconsistencyError(
                'boundaries are not monotonic: leader_start={}, adapter_start={}, '
                'polya_start={}, transcript_start={}'.format(*positions),
                key=self.read_id,
            )

    @property
    def polya_end(self):
        return self.transcript_start - 1

    @property
    def tail_length(self):
        return self.polya_end - self.polya_start + 1


@dataclass(frozen=True)
class SegmentedSignal:
    """Per-sample segment codes for one read.

    ``tail_start``/``tail_end`` are the 1-based inclusive poly(A) bounds that
    the raw signal actually covers; ``tail_end < tail_start`` means the tail
    lies outside the signal.
    """
    ADAPTER = 0
    POLYA = 1
    TRANSCRIPT = 2
    LABELS = ('adapter', 'poly(A)', 'transcript')

    read_id: str
    segments: np.ndarray
    tail_start: int
    tail_end: int

    def __post_init__(self):
        object.__setattr__(self, 'segments', _frozen_array(self.segments, np.int8))

    @property
    def tail_slice(self):
        """0-based slice of the poly(A) samples."""
        return slice(self.tail_start - 1, max(self.tail_end, self.tail_start - 1))

    @property
    def tail_samples(self):
        return max(0, self.tail_end - self.tail_start + 1)

    def labels(self):
        """Segment names per sample."""
        return np.asarray(self.LABELS, dtype=object)[self.segments]


@dataclass(frozen=True)
class Chunk:
    """Contiguous slice of the poly(A) signal; the unit of classification."""
    read_id: str
    index: int                    # 1-based, temporal order within the tail
    start: int                    # 1-based inclusive read position
    end: int
    signal: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'signal', _frozen_array(self.signal))

    @property
    def name(self):
        return f'{self.read_id}_{self.index}'

    def __len__(self):
        return len(self.signal)


@dataclass(frozen=True)
class GAFMatrix:
    """Stacked GASF/GADF image of one chunk, shape ``(N, N, 2)``."""
    chunk_name: str
    matrix: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'matrix', _frozen_array(self.matrix, np.float32))

    @property
    def gasf(self):
        return self.matrix[..., 0]

    @property
    def gadf(self):
        return self.matrix[..., 1]


@dataclass(frozen=True)
class ReadResult:
    """Outcome of processing one read in a worker.

    A failed read keeps ``error``/``error_type`` and has no chunks.
    """
    read_id: str
    boundary: TailBoundary = None
    tail_samples: int = 0
    tail_seconds: float = 0.0
    chunks: tuple = ()
    gafs: tuple = ()
    skipped: dict = field(default_factory=dict)     # {chunk_name: reason}
    error: str = None
    error_type: str = None
    predictions: dict = field(default_factory=dict)  # {chunk_name: (label, prob)}

    @property
    def ok(self):
        return self.error is None
