# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Shared fixtures: synthetic reads with a known tail layout."""

import numpy as np
import pytest

from ninetails.core.records import ReadSignal, TailBoundary


def synthetic_read(read_id='read1', length=1000, stride=10, n_events=None,
                   move_every=5, seed=0):
    """Noisy read whose moves fire on every *move_every*-th event.

    With the defaults, the expanded moves enter a run of ones at read
    offsets 0, 50, 100, ...
    """
    rng = np.random.default_rng(seed)
    signal = np.round(rng.normal(100, 10, length)).astype(np.int64)
    if n_events is None:
        n_events = length // stride
    move = (np.arange(n_events) % move_every == 0).astype(np.int8)
    return ReadSignal(read_id, signal, move, stride=stride, called_events=n_events,
                      digitisation=8192, offset=10, range=1400, sampling_rate=3012)


@pytest.fixture
def make_read():
    return synthetic_read


@pytest.fixture
def boundary():
    """Tail covering 1-based positions 301..700 (offsets 300..699)."""
    return TailBoundary('read1', leader_start=1, adapter_start=50,
                        polya_start=301, transcript_start=701)
