# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Per-read pipeline and batch orchestration.

A read travels load -> winsorize -> expand/smooth -> locate tail -> split ->
encode inside a single worker. Workers share nothing except the frozen
:class:`PipelineConfig` and a picklable read loader; results come back
through the pool's result queue. Classification happens afterwards in the
parent process with an explicitly passed classifier.
"""

import dataclasses
import functools
import logging as lg
from multiprocessing import Pool

import numpy as np

from ..errors import ConfigurationError, DegenerateSignalError, ReadError
from .gaf import GAFEncoder
from .records import ReadResult
from .segmentation import locate_tail_region, split_tail
from .signal import expand_moves, filter_signal_by_threshold, substitute_gaps, winsorize_signal


def _tail_events(read, signal, segmented, config):
    """Smoothed event vector aligned with the poly(A) samples."""
    if config.event_source == 'pseudomoves':
        tail = signal[segmented.tail_slice]
        pseudomoves = filter_signal_by_threshold(
            tail, config.zscore_lag, config.zscore_threshold, config.zscore_influence)
        return substitute_gaps(pseudomoves, config.gap_threshold)

    if len(read.move) != read.called_events:
        lg.debug(f'{read.read_id}: {len(read.move)} moves but called_events={read.called_events}')
    moves = expand_moves(read.move, read.stride, signal.size,
                         config.max_overflow_events, read_id=read.read_id)
    return substitute_gaps(moves, config.gap_threshold)[segmented.tail_slice]


def process_read(read, boundary, config, encoder=None):
    """Run one read through the numeric core.

    Args:
        read: :class:`ReadSignal`.
        boundary: :class:`TailBoundary` of the same read.
        config: :class:`PipelineConfig`.
        encoder: :class:`GAFEncoder`; built from *config* when omitted.

    Returns:
        :class:`ReadResult` with chunks and the GAF matrices of every chunk
        that could be encoded.

    Raises:
        ReadError: the read cannot be processed at all.
    """
    if encoder is None:
        encoder = GAFEncoder(config.gaf_size, on_degenerate=_encoder_policy(config))

    signal = winsorize_signal(read.signal, config.winsor_lower, config.winsor_upper,
                              read_id=read.read_id)
    segmented = locate_tail_region(read.read_id, signal.size, boundary)
    events = _tail_events(read, signal, segmented, config)
    chunks = split_tail(read.read_id, signal[segmented.tail_slice], events,
                        chunk_size=config.chunk_size, tail_start=segmented.tail_start)

    gafs = []
    skipped = {}
    for chunk in chunks:
        try:
            gafs.append(encoder.encode(chunk))
        except DegenerateSignalError as exc:
            skipped[chunk.name] = str(exc)

    return ReadResult(
        read_id=read.read_id,
        boundary=boundary,
        tail_samples=segmented.tail_samples,
        tail_seconds=read.duration(segmented.tail_samples),
        chunks=tuple(chunks),
        gafs=tuple(gafs),
        skipped=skipped,
    )


def _encoder_policy(config):
    return 'constant' if config.degenerate_policy == 'constant' else 'raise'


def _read_worker(boundary, loader, config):
    """Load and process one read; per-read errors become failed results."""
    try:
        read = loader.load(boundary.read_id)
        return process_read(read, boundary, config)
    except ReadError as exc:
        return ReadResult(boundary.read_id, boundary=boundary,
                          error=str(exc), error_type=type(exc).__name__)


def _log_result(result):
    if not result.ok:
        lg.warning(f'Read {result.read_id} skipped ({result.error_type}): {result.error}')
    for name, reason in result.skipped.items():
        lg.warning(f'Chunk {name} not encoded: {reason}')
    return result


def run_batch(boundaries, loader, config, ncpu=1, chunksize=8):
    """Process reads, yielding one :class:`ReadResult` per boundary record.

    Args:
        boundaries: Iterable of :class:`TailBoundary`; one task per record.
        loader: Picklable :class:`ReadLoader`.
        config: Validated :class:`PipelineConfig`.
        ncpu: Worker processes. 1 runs in-process.
        chunksize: Tasks handed to a worker at a time.

    Yields:
        ReadResult, in completion order when ``ncpu > 1``.
    """
    worker = functools.partial(_read_worker, loader=loader, config=config)
    if ncpu > 1:
        lg.info(f'Processing reads with {ncpu} workers')
        with Pool(processes=ncpu) as pool:
            for result in pool.imap_unordered(worker, boundaries, chunksize=chunksize):
                yield _log_result(result)
    else:
        for result in map(worker, boundaries):
            yield _log_result(result)


def classify_results(results, classifier):
    """Attach ``(label, probability)`` predictions to every encoded chunk.

    Args:
        results: Iterable of :class:`ReadResult`.
        classifier: Loaded :class:`Classifier` instance.

    Yields:
        New ReadResult objects with ``predictions`` filled in.

    Raises:
        ConfigurationError: the classifier output does not match its labels.
    """
    labels = tuple(classifier.labels)
    for result in results:
        if not result.gafs:
            yield result
            continue
        batch = np.stack([g.matrix for g in result.gafs])
        probs = np.asarray(classifier.predict(batch))
        if probs.shape != (len(result.gafs), len(labels)):
            raise ConfigurationError(
                f"classifier '{classifier.name}' returned shape {probs.shape}, "
                f'expected {(len(result.gafs), len(labels))}')
        best = probs.argmax(axis=1)
        predictions = {
            g.chunk_name: (labels[k], float(probs[i, k]))
            for i, (g, k) in enumerate(zip(result.gafs, best))
        }
        yield dataclasses.replace(result, predictions=predictions)


def check_classifier(classifier, gaf_size):
    """Run one blank image through *classifier* before any read is touched.

    Raises:
        ConfigurationError: the output is not ``(1, len(labels))``.
    """
    blank = np.zeros((1, gaf_size, gaf_size, 2), dtype=np.float32)
    shape = np.shape(classifier.predict(blank))
    expected = (1, len(classifier.labels))
    if shape != expected:
        raise ConfigurationError(
            f"classifier '{classifier.name}' returned shape {shape} for a "
            f'{gaf_size}x{gaf_size}x2 image, expected {expected}')
    return classifier
