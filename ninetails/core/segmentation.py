# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Tail region tagging and chunk segmentation."""

import logging as lg

import numpy as np

from ..errors import BoundaryInconsistencyError, InvalidSignalError
from .records import Chunk, SegmentedSignal


def locate_tail_region(read_id, signal_length, boundary):
    """Tag every sample of a read as adapter, poly(A) or transcript.

    Args:
        read_id: Read identifier.
        signal_length: Number of raw samples.
        boundary: :class:`TailBoundary` of the read.

    Returns:
        :class:`SegmentedSignal`. The poly(A) bounds are clipped to the
        samples the signal covers.

    Raises:
        BoundaryInconsistencyError: the tail holds no samples.
    """
    if boundary.polya_start > boundary.polya_end:
        raise BoundaryInconsistencyError(
            f'empty poly(A) tail (polya_start={boundary.polya_start}, '
            f'transcript_start={boundary.transcript_start})',
            key=read_id,
        )

    positions = np.arange(1, signal_length + 1)
    segments = np.full(signal_length, SegmentedSignal.ADAPTER, dtype=np.int8)
    segments[positions >= boundary.transcript_start] = SegmentedSignal.TRANSCRIPT
    in_tail = (positions >= boundary.polya_start) & (positions <= boundary.polya_end)
    segments[in_tail] = SegmentedSignal.POLYA

    tail_start = max(boundary.polya_start, 1)
    tail_end = min(boundary.polya_end, signal_length)
    if tail_end < tail_start:
        lg.debug(f'{read_id}: poly(A) tail lies outside the {signal_length} sample signal')
    return SegmentedSignal(read_id, segments, tail_start, tail_end)


def find_breakpoints(events):
    """0-based offsets where *events* enters a new non-zero, non-missing run."""
    v = np.asarray(events, dtype=np.float64)
    if v.size < 2:
        return np.zeros(0, dtype=np.int64)
    cur, prev = v[1:], v[:-1]
    rising = (cur != 0) & ~np.isnan(cur) & (cur != prev)
    return np.flatnonzero(rising) + 1


def split_tail(read_id, tail_signal, tail_events=None, chunk_size=100, tail_start=1):
    """Partition the poly(A) signal into consecutive chunks.

    Chunks start at every event breakpoint when the event vector fully covers
    the tail and has at least one break; otherwise the tail is treated as a
    single span. Any span longer than *chunk_size* is cut into windows of
    *chunk_size* samples starting at the span's first sample (the last one
    may be shorter), so no chunk exceeds *chunk_size*.

    Args:
        read_id: Read identifier, used to name chunks.
        tail_signal: Samples of the poly(A) region.
        tail_events: Smoothed move or pseudomove vector aligned with
            *tail_signal*, or None.
        chunk_size: Maximum chunk length.
        tail_start: 1-based read position of ``tail_signal[0]``.

    Returns:
        List of :class:`Chunk` in temporal order; empty for an empty tail.
    """
    tail_signal = np.asarray(tail_signal)
    n = tail_signal.size
    if n == 0:
        return []

    breaks = np.zeros(0, dtype=np.int64)
    if tail_events is not None:
        events = np.asarray(tail_events, dtype=np.float64)
        if events.size != n:
            raise InvalidSignalError(
                f'event vector length {events.size} does not match tail length {n}',
                key=read_id)
        if not np.isnan(events).any():
            breaks = find_breakpoints(events)
    if not breaks.size:
        lg.debug(f'{read_id}: no reliable event breaks, using {chunk_size}-sample windows')

    spans = np.concatenate(([0], breaks, [n])).astype(np.int64)
    starts = np.concatenate([
        np.arange(lo, hi, chunk_size) for lo, hi in zip(spans[:-1], spans[1:])
    ])
    bounds = np.append(starts, n)
    return [
        Chunk(read_id, k + 1, int(tail_start + lo), int(tail_start + hi - 1), tail_signal[lo:hi])
        for k, (lo, hi) in enumerate(zip(bounds[:-1], bounds[1:]))
    ]
