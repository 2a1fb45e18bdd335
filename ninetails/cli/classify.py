# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

""" Ninetails classify

"""
import os
import sys
from time import time
import logging as lg

from . import SubcommandOptions, configure_logging
from .console import Stopwatch
from ..core.config import PipelineConfig
from ..core.pipeline import check_classifier, classify_results, run_batch
from ..core.reporter import ReportWriter
from ..errors import ConfigurationError
from ..io.boundaries import read_polya_table
from ..io.reads import NpzReadLoader
from ..plugins.registry import ClassifierRegistry


class ClassifyOptions(SubcommandOptions):

    OPTS = """
    - Input Options:
        - reads_dir:
            positional: True
            help: Directory with one <read_id>.npz archive per read (raw
                  signal, move table, stride and channel calibration).
        - polya:
            positional: True
            help: Tail boundary table (nanopolish polya TSV) with readname,
                  leader_start, adapter_start, polya_start, transcript_start
                  and optionally qc_tag.
        - no_qc_filter:
            action: store_true
            help: Keep tail records whose qc_tag is not PASS.
    - Reporting Options:
        - quiet:
            action: store_true
            help: Silence (most) output.
        - verbose:
            action: store_true
            help: Show detailed progress.
        - debug:
            action: store_true
            help: Print debug messages.
        - logfile:
            type: argparse.FileType('w')
            help: Log output to this file.
        - outdir:
            default: .
            help: Output directory.
        - exp_tag:
            default: ninetails
            help: Experiment tag, prefixed to every output file.
        - save_gafs:
            action: store_true
            help: Also write all GAF matrices to <exp_tag>-gafs.npz.
    - Signal Processing:
        - winsor_lower:
            type: float
            default: 0.005
            help: Lower quantile for clipping current jets.
        - winsor_upper:
            type: float
            default: 0.995
            help: Upper quantile for clipping current jets.
        - event_source:
            default: moves
            choices:
                - moves
                - pseudomoves
            help: >
                  Event vector used to place chunk breaks. "moves" expands the
                  basecaller move table to sample resolution; "pseudomoves"
                  flags z-score excursions of the tail signal.
        - gap_threshold:
            type: int
            default: 3
            help: Zero runs shorter than this, enclosed by two equal runs,
                  are filled before chunking. Not calibrated on real data.
        - max_overflow_events:
            type: int
            default: 1
            help: Events by which moves x stride may overshoot the signal
                  before the read is rejected.
        - chunk_size:
            type: int
            default: 100
            help: Maximum chunk length. Spans between event breaks (or the
                  whole tail without reliable breaks) are cut into windows
                  of this size.
        - zscore_lag:
            type: int
            default: 100
            help: Pseudomove filter window.
        - zscore_threshold:
            type: float
            default: 3.5
            help: Pseudomove filter threshold in standard deviations.
        - zscore_influence:
            type: float
            default: 0.5
            help: Weight of flagged samples in the pseudomove filter.
    - Encoding Options:
        - gaf_size:
            type: int
            default: 100
            help: Side length of the GASF/GADF images.
        - degenerate_policy:
            default: skip
            choices:
                - skip
                - constant
            help: >
                  Handling of zero-variance chunks. "skip" leaves them out;
                  "constant" encodes them as a constant field.
    - Classifier Options:
        - classifier:
            default: none
            help: Name of an installed classifier (see list-classifiers), or
                  "none" to only segment and encode.
        - model:
            help: Model file passed to the classifier.
        - batch_size:
            type: int
            default: 256
            help: Prediction batch size.
    - Performance Options:
        - ncpu:
            type: int
            default: 1
            help: Number of worker processes.
        - chunksize:
            type: int
            default: 8
            help: Reads handed to a worker at a time.
    """

    def __init__(self, args):
        super().__init__(args)
        if self.logfile is None:
            self.logfile = sys.stderr


def _load_classifier(opts, gaf_size):
    if opts.classifier in (None, 'none'):
        return None
    registry = ClassifierRegistry().discover()
    classifier = registry.get(opts.classifier)
    if classifier is None:
        raise ConfigurationError(
            f"classifier '{opts.classifier}' is not available "
            f"(installed: {', '.join(registry.names) or 'none'})")
    classifier.configure(opts)
    classifier.load()
    return check_classifier(classifier, gaf_size)


def run(args):
    """Segment, encode and optionally classify the tails of all reads.

    Args:
        args: Parsed argparse namespace.

    Raises:
        ConfigurationError: invalid options, before any read is processed.
    """
    opts = ClassifyOptions(args)
    console = configure_logging(opts)
    lg.info('\n{}\n'.format(opts))
    total_time = time()
    stopwatch = Stopwatch()

    config = PipelineConfig.from_opts(opts)
    if opts.ncpu < 1:
        raise ConfigurationError('ncpu must be >= 1')

    console.banner(opts.version)
    console.section('Input')
    console.item('Reads', opts.reads_dir)
    console.item('Tails', os.path.basename(opts.polya))
    console.item('Events', config.event_source)
    console.item('Classifier', opts.classifier)
    console.blank()

    stopwatch.start('Load inputs', unit='tails')
    classifier = _load_classifier(opts, config.gaf_size)
    loader = NpzReadLoader(opts.reads_dir)
    boundaries = read_polya_table(opts.polya, qc_pass_only=not opts.no_qc_filter)
    available = set(loader.read_ids())
    tasks = [b for rid, b in boundaries.items() if rid in available]
    stopwatch.count(len(boundaries))
    _no_signal = len(boundaries) - len(tasks)
    if _no_signal:
        lg.warning(f'{_no_signal} tail records have no read archive and are skipped')
    console.status('{:,} reads with tail boundaries ({:,} without signal data)'.format(
        len(tasks), _no_signal))

    stopwatch.start('Process reads', unit='reads')
    results = run_batch(tasks, loader, config, ncpu=opts.ncpu, chunksize=opts.chunksize)
    if classifier is not None:
        results = classify_results(results, classifier)
    writer = ReportWriter(
        reference_label=classifier.reference_label if classifier else 'A',
        save_gafs=opts.save_gafs,
    )
    for result in results:
        writer.add(result)
        stopwatch.count()
        console.read_done(result)

    stopwatch.start('Write reports', unit='files')
    written = writer.write(opts.outdir, opts.exp_tag)
    stopwatch.count(len(written))
    stopwatch.stop()

    console.blank()
    console.run_summary(writer.stats, classified=classifier is not None)
    console.blank()
    console.output_files(written)
    console.blank()
    console.timing_table(stopwatch)
    lg.info('ninetails classify complete ({:.1f}s)'.format(time() - total_time))
