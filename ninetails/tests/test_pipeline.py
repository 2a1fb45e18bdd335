# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Tests for the per-read pipeline, batch orchestration and classification."""

import dataclasses
from types import SimpleNamespace

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from conftest import synthetic_read
from ninetails.core.config import PipelineConfig
from ninetails.core.pipeline import check_classifier, classify_results, process_read, run_batch
from ninetails.core.records import TailBoundary
from ninetails.core.signal import winsorize_signal
from ninetails.errors import ConfigurationError
from ninetails.io.reads import MemoryReadLoader, NpzReadLoader
from ninetails.plugins.abc import Classifier


def _boundary(read_id):
    return TailBoundary(read_id, 1, 50, 301, 701)


class StubClassifier(Classifier):
    """Calls every chunk 'A' except the second one of each read."""

    @property
    def name(self):
        return 'stub'

    def predict(self, batch):
        probs = np.tile([0.7, 0.1, 0.1, 0.1], (len(batch), 1))
        if len(batch) > 1:
            probs[1] = [0.1, 0.1, 0.2, 0.6]
        return probs


class TestPipelineConfig:
    def test_defaults_are_valid(self):
        assert PipelineConfig().validate() == PipelineConfig()

    @pytest.mark.parametrize('kwargs', [
        {'winsor_lower': 0.9, 'winsor_upper': 0.1},
        {'event_source': 'basecalls'},
        {'degenerate_policy': 'drop'},
        {'gaf_size': 0},
        {'chunk_size': 0},
        {'max_overflow_events': -1},
        {'zscore_influence': 1.5},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            PipelineConfig(**kwargs).validate()

    def test_from_opts_ignores_unset(self):
        opts = SimpleNamespace(chunk_size=50, gaf_size=None, ncpu=4)
        config = PipelineConfig.from_opts(opts)
        assert config.chunk_size == 50
        assert config.gaf_size == 100


class TestProcessRead:
    def test_move_breaks(self, make_read, boundary):
        read = make_read()
        result = process_read(read, boundary, PipelineConfig())
        assert result.ok
        assert result.tail_samples == 400
        assert result.tail_seconds == pytest.approx(400 / 3012)
        assert [len(c) for c in result.chunks] == [50] * 8
        assert [c.start for c in result.chunks] == list(range(301, 701, 50))
        assert len(result.gafs) == 8
        assert result.gafs[0].matrix.shape == (100, 100, 2)

        winsorized = winsorize_signal(read.signal)
        assert_array_equal(np.concatenate([c.signal for c in result.chunks]),
                           winsorized[300:700])

    def test_sparse_moves_keep_chunks_short(self, make_read):
        # moves fire every 600 samples inside a 2400-sample tail
        read = make_read(length=3000, move_every=60)
        result = process_read(read, TailBoundary('read1', 1, 50, 301, 2701),
                              PipelineConfig(gaf_size=16))
        assert max(len(c) for c in result.chunks) == 100
        assert sum(len(c) for c in result.chunks) == 2400
        assert {601, 1201, 1801, 2401} <= {c.start for c in result.chunks}

    def test_uncovered_tail_uses_windows(self, make_read, boundary):
        # 50 events x stride 10 leave samples 500.. without moves
        result = process_read(make_read(n_events=50), boundary, PipelineConfig())
        assert [len(c) for c in result.chunks] == [100] * 4

    def test_constant_chunk_is_skipped(self, make_read, boundary):
        read = make_read()
        signal = read.signal.copy()
        signal[300:350] = 100
        read = dataclasses.replace(read, signal=signal)

        result = process_read(read, boundary, PipelineConfig())
        assert len(result.chunks) == 8
        assert len(result.gafs) == 7
        assert list(result.skipped) == ['read1_1']
        assert result.gafs[0].chunk_name == 'read1_2'

        constant = process_read(read, boundary, PipelineConfig(degenerate_policy='constant'))
        assert len(constant.gafs) == 8
        assert not constant.skipped

    def test_pseudomoves(self, make_read, boundary):
        read = make_read()
        result = process_read(read, boundary, PipelineConfig(event_source='pseudomoves'))
        assert result.ok
        assert sum(len(c) for c in result.chunks) == 400
        assert [c.index for c in result.chunks] == list(range(1, len(result.chunks) + 1))
        assert_array_equal(np.concatenate([c.signal for c in result.chunks]),
                           winsorize_signal(read.signal)[300:700])

    def test_tail_beyond_signal(self, make_read):
        result = process_read(make_read(), TailBoundary('read1', 1, 50, 1201, 1301),
                              PipelineConfig())
        assert result.ok
        assert result.chunks == ()
        assert result.tail_samples == 0


class TestRunBatch:
    def test_bad_read_does_not_stop_batch(self):
        reads = [synthetic_read('good1'), synthetic_read('bad', n_events=102),
                 synthetic_read('good2', seed=1)]
        loader = MemoryReadLoader(reads)
        results = {r.read_id: r for r in run_batch(
            [_boundary(r.read_id) for r in reads], loader, PipelineConfig())}

        assert results['good1'].ok and results['good2'].ok
        assert not results['bad'].ok
        assert results['bad'].error_type == 'AlignmentOverflowError'
        assert results['bad'].chunks == ()
        assert 'bad' in results['bad'].error

    def test_corrupt_archive_does_not_stop_batch(self, tmp_path):
        reads_dir = str(tmp_path)
        NpzReadLoader.save(reads_dir, synthetic_read('good1'))
        (tmp_path / 'bad.npz').write_bytes(b'not a zip archive')
        NpzReadLoader.save(reads_dir, synthetic_read('good2', seed=1))
        loader = NpzReadLoader(reads_dir)

        results = {r.read_id: r for r in run_batch(
            [_boundary(rid) for rid in ('good1', 'bad', 'good2')], loader, PipelineConfig())}
        assert results['good1'].ok and results['good2'].ok
        assert results['bad'].error_type == 'InvalidSignalError'
        assert results['bad'].chunks == ()

    def test_missing_read(self):
        loader = MemoryReadLoader([synthetic_read('read1')])
        results = list(run_batch([_boundary('other')], loader, PipelineConfig()))
        assert results[0].error_type == 'ReadNotFoundError'

    def test_workers_match_serial(self):
        reads = [synthetic_read(f'r{i}', seed=i) for i in range(6)]
        loader = MemoryReadLoader(reads)
        boundaries = [_boundary(r.read_id) for r in reads]
        config = PipelineConfig(gaf_size=16)

        serial = {r.read_id: r for r in run_batch(boundaries, loader, config)}
        parallel = {r.read_id: r for r in run_batch(boundaries, loader, config,
                                                    ncpu=2, chunksize=2)}
        assert sorted(serial) == sorted(parallel)
        for read_id, result in serial.items():
            other = parallel[read_id]
            assert [c.name for c in result.chunks] == [c.name for c in other.chunks]
            for a, b in zip(result.gafs, other.gafs):
                assert_array_equal(a.matrix, b.matrix)


class TestClassifyResults:
    def test_predictions(self, make_read, boundary):
        results = list(run_batch([boundary], MemoryReadLoader([make_read()]),
                                 PipelineConfig(gaf_size=16)))
        classified = list(classify_results(results, StubClassifier()))
        predictions = classified[0].predictions
        assert len(predictions) == 8
        assert predictions['read1_1'] == ('A', pytest.approx(0.7))
        assert predictions['read1_2'][0] == 'U'
        assert results[0].predictions == {}

    def test_failed_reads_pass_through(self):
        results = list(run_batch([_boundary('missing')], MemoryReadLoader([]),
                                 PipelineConfig()))
        classified = list(classify_results(results, StubClassifier()))
        assert classified[0] is results[0]

    def test_wrong_output_shape(self, make_read, boundary):
        class Broken(StubClassifier):
            def predict(self, batch):
                return np.ones((len(batch), 2))

        results = run_batch([boundary], MemoryReadLoader([make_read()]),
                            PipelineConfig(gaf_size=16))
        with pytest.raises(ConfigurationError):
            list(classify_results(results, Broken()))


class TestCheckClassifier:
    def test_accepts_matching_output(self):
        clf = StubClassifier()
        assert check_classifier(clf, 16) is clf

    @pytest.mark.parametrize('output', [np.ones((1, 2)), np.ones(4), np.ones((2, 4))])
    def test_rejects_wrong_shape(self, output):
        class Mismatched(StubClassifier):
            def predict(self, batch):
                assert batch.shape == (1, 16, 16, 2)
                return output

        with pytest.raises(ConfigurationError, match='16x16x2'):
            check_classifier(Mismatched(), 16)
