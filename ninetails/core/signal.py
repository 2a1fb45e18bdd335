# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Sample-level signal transforms: winsorizing, move expansion, gap smoothing.

All functions are pure; inputs are never modified in place.
"""

import logging as lg
from dataclasses import dataclass

import numpy as np

from ..errors import AlignmentOverflowError, InvalidSignalError

# Marker for samples without basecaller coverage
MISSING = np.nan


def winsorize_signal(signal, lower=0.005, upper=0.995, read_id=None):
    """Clamp current jets to the empirical quantile range of the read.

    Quantiles use linear interpolation between order statistics (Hyndman &
    Fan type 7). Clamped values are truncated toward zero.

    Args:
        signal: 1-D sequence of raw current values.
        lower: Lower quantile probability.
        upper: Upper quantile probability.
        read_id: Identifier used in error messages.

    Returns:
        int64 ndarray with the same length as *signal*.

    Raises:
        InvalidSignalError: empty, non-numeric or non-finite input.
    """
    try:
        values = np.asarray(signal, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidSignalError(f'signal is not numeric ({exc})', key=read_id) from exc
    if values.ndim != 1 or values.size == 0:
        raise InvalidSignalError('signal must be a non-empty 1-D vector', key=read_id)
    if not np.isfinite(values).all():
        raise InvalidSignalError('signal contains missing or non-finite values', key=read_id)

    q_low, q_high = np.quantile(values, [lower, upper], method='linear')
    clipped = np.clip(values, q_low, q_high)
    return np.trunc(clipped).astype(np.int64)


def expand_moves(move, stride, signal_length, max_overflow_events=1, read_id=None):
    """Map per-event moves onto raw sample resolution.

    Every move is repeated *stride* times. Samples past the last event are
    filled with :data:`MISSING`; an expansion longer than the signal is cut
    to *signal_length*.

    Raises:
        InvalidSignalError: non-positive stride or negative length.
        AlignmentOverflowError: the expansion overshoots the signal by more
            than *max_overflow_events* events.
    """
    if stride < 1:
        raise InvalidSignalError(f'stride must be positive, got {stride}', key=read_id)
    if signal_length < 0:
        raise InvalidSignalError('signal length must be >= 0', key=read_id)

    expanded = np.repeat(np.asarray(move, dtype=np.float64), stride)
    overshoot = expanded.size - signal_length
    if overshoot > max_overflow_events * stride:
        raise AlignmentOverflowError(
            f'{expanded.size // stride} events x stride {stride} = {expanded.size} samples '
            f'exceeds signal length {signal_length} by {overshoot}',
            key=read_id,
        )
    if overshoot > 0:
        lg.debug(f'{read_id}: truncating expanded moves by {overshoot} samples')
        return expanded[:signal_length]
    return np.concatenate((expanded, np.full(-overshoot, MISSING)))


@dataclass(frozen=True)
class Runs:
    """Run-length encoding of a vector: ``values[k]`` repeated ``lengths[k]`` times."""
    values: np.ndarray
    lengths: np.ndarray

    def __len__(self):
        return len(self.values)

    def expand(self):
        return np.repeat(self.values, self.lengths)


def run_length_encode(vector):
    """Encode *vector* as :class:`Runs`. Consecutive missing markers share a run."""
    v = np.asarray(vector, dtype=np.float64)
    if v.size == 0:
        return Runs(v, np.zeros(0, dtype=np.int64))
    both_missing = np.isnan(v[1:]) & np.isnan(v[:-1])
    changes = ~((v[1:] == v[:-1]) | both_missing)
    starts = np.flatnonzero(np.concatenate(([True], changes)))
    lengths = np.diff(np.append(starts, v.size))
    return Runs(v[starts], lengths)


def run_length_decode(runs, dtype=np.float64):
    return runs.expand().astype(dtype, copy=False)


def substitute_gaps(vector, max_gap=3):
    """Fill short zero runs enclosed by two runs of the same value.

    A zero run shorter than *max_gap* whose previous and next runs carry the
    same value takes that value, so a single excursion is not reported as
    several. The first and last runs are never filled. Missing markers never
    compare equal and therefore never enclose a gap.

    Returns:
        ndarray of the input length and dtype.
    """
    dtype = np.asarray(vector).dtype
    if not np.issubdtype(dtype, np.number):
        dtype = np.float64
    runs = run_length_encode(vector)
    if len(runs) < 3:
        return run_length_decode(runs, dtype)

    vals = runs.values
    gap = np.zeros(len(runs), dtype=bool)
    gap[1:-1] = (runs.lengths[1:-1] < max_gap) & (vals[1:-1] == 0) & (vals[:-2] == vals[2:])
    if not gap.any():
        return run_length_decode(runs, dtype)

    filled = vals.copy()
    idx = np.flatnonzero(gap)
    filled[idx] = vals[idx - 1]
    return run_length_decode(Runs(filled, runs.lengths), dtype)


def filter_signal_by_threshold(signal, lag=100, threshold=3.5, influence=0.5):
    """Flag local excursions with a smoothed z-score filter (pseudomoves).

    Sample ``i >= lag`` is flagged ``+1``/``-1`` when it lies more than
    *threshold* standard deviations above/below the mean of the previous
    *lag* filtered samples. Flagged samples enter the filtered series damped
    by *influence*.

    Returns:
        int8 ndarray of the input length with values in {-1, 0, 1}.
    """
    y = np.asarray(signal, dtype=np.float64)
    flags = np.zeros(y.size, dtype=np.int8)
    if y.size <= lag:
        return flags

    filtered = y.copy()
    for i in range(lag, y.size):
        window = filtered[i - lag:i]
        avg = window.mean()
        sd = window.std(ddof=1) if lag > 1 else 0.0
        if abs(y[i] - avg) > threshold * sd:
            flags[i] = 1 if y[i] > avg else -1
            filtered[i] = influence * y[i] + (1 - influence) * filtered[i - 1]
    return flags
