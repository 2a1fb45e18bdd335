# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Human-readable stdout for the Ninetails CLI.

Diagnostics go through logging on stderr; the Console only reports what a
run did: inputs, per-stage counts, read outcomes and the files written.
"""

import sys
from time import perf_counter


class Stopwatch:
    """Wall-clock stages of one run, each counting the items it handled."""

    def __init__(self):
        self._stages = []         # [(name, elapsed, count, unit)]
        self._start = None
        self._active = None

    def start(self, name, unit=None):
        """Close the running stage and begin *name*, counting *unit* items."""
        self.stop()
        now = perf_counter()
        if self._start is None:
            self._start = now
        self._active = [name, now, 0, unit]

    def count(self, n=1):
        if self._active:
            self._active[2] += n

    def stop(self):
        if self._active:
            name, began, n, unit = self._active
            self._stages.append((name, perf_counter() - began, n, unit))
            self._active = None

    @property
    def total(self):
        return perf_counter() - self._start if self._start else 0.0

    @property
    def stages(self):
        return list(self._stages)


class Console:
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    def __init__(self, level=NORMAL, stream=None):
        self.level = level
        self.stream = stream or sys.stdout
        self._bold = hasattr(self.stream, 'isatty') and self.stream.isatty()

    def _show(self, level=NORMAL):
        return self.level >= level

    def banner(self, version):
        if not self._show():
            return
        title = 'Ninetails v{}'.format(version)
        if self._bold:
            title = '\033[1m{}\033[0m'.format(title)
        self._write('')
        self._write('{} -- poly(A) tail composition'.format(title))
        self._write('')

    def section(self, title):
        if self._show():
            self._write('  {}'.format(title))

    def item(self, label, value):
        if self._show():
            self._write('    {:<14}{}'.format(label + ':', value))

    def status(self, message):
        if self._show():
            self._write('  {}'.format(message))

    def blank(self):
        if self._show():
            self._write('')

    def read_done(self, result):
        """One line per read in verbose mode."""
        if not self._show(self.VERBOSE):
            return
        if not result.ok:
            self._write('    {:<40}failed ({})'.format(result.read_id, result.error_type))
            return
        self._write('    {:<40}{:>4} chunks {:>4} encoded {:>4} skipped'.format(
            result.read_id, len(result.chunks), len(result.gafs), len(result.skipped)))

    def run_summary(self, stats, classified=False):
        """Read and chunk totals from a :class:`ReportWriter` stats counter."""
        if not self._show():
            return
        self.section('Reads')
        self.item('processed', '{:,}'.format(stats['reads_processed']))
        self.item('failed', '{:,}'.format(stats['reads_failed']))
        for key in sorted(k for k in stats if k.startswith('failed_')):
            self.item('  ' + key[len('failed_'):], '{:,}'.format(stats[key]))
        self.item('no chunks', '{:,}'.format(stats['reads_without_chunks']))
        if classified:
            self.item('modified', '{:,}'.format(stats['class_modified']))
            self.item('unmodified', '{:,}'.format(stats['class_unmodified']))
        self.section('Chunks')
        self.item('total', '{:,}'.format(stats['chunks_total']))
        self.item('encoded', '{:,}'.format(stats['chunks_encoded']))
        self.item('skipped', '{:,}'.format(stats['chunks_skipped']))

    def output_files(self, paths):
        if not self._show():
            return
        self.section('Output')
        for path in paths:
            self._write('    {}'.format(path))

    def timing_table(self, stopwatch):
        """Stage times with item counts and throughput."""
        stages = stopwatch.stages
        if not stages or not self._show():
            return
        total = stopwatch.total
        self.section('Timing')
        for name, elapsed, n, unit in stages:
            if unit:
                rate = '{:,.0f} {}/s'.format(n / elapsed, unit) if elapsed > 0 else ''
                counted = '{:,} {}'.format(n, unit)
            else:
                rate = counted = ''
            self._write('    {:<16}{:>7.1f}s  {:<16}{}'.format(name, elapsed, counted, rate))
        self._write('    ' + '-' * 40)
        self._write('    {:<16}{:>7.1f}s'.format('Total', total))

    def _write(self, text):
        print(text, file=self.stream)
