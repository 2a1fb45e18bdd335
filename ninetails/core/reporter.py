# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Report generation for Ninetails runs.

Results are consumed one at a time so that GAF images of the whole batch
never have to be held in memory unless ``save_gafs`` is requested.
"""

import os
from collections import Counter, OrderedDict

import numpy as np
import pandas as pd

CHUNK_COLUMNS = ['read_id', 'chunk_name', 'index', 'start', 'end', 'length',
                 'encoded', 'prediction', 'probability']
READ_COLUMNS = ['read_id', 'polya_start', 'polya_end', 'tail_samples', 'tail_seconds',
                'n_chunks', 'n_encoded', 'n_nonA', 'class', 'comment']


def read_class(result, reference_label='A'):
    """``modified``, ``unmodified`` or ``unclassified`` for one read."""
    if not result.ok or not result.predictions:
        return 'unclassified'
    if any(label != reference_label for label, _ in result.predictions.values()):
        return 'modified'
    return 'unmodified'


class ReportWriter:
    """Accumulates per-chunk and per-read rows and run statistics.

    Args:
        reference_label: Label counted as unmodified.
        save_gafs: Keep GAF matrices for :meth:`write`.
    """

    def __init__(self, reference_label='A', save_gafs=False):
        self.reference_label = reference_label
        self.save_gafs = save_gafs
        self.stats = Counter()
        self._chunk_rows = []
        self._read_rows = []
        self._gafs = OrderedDict()

    def add(self, result):
        self.stats['reads_total'] += 1
        boundary = result.boundary
        row = {
            'read_id': result.read_id,
            'polya_start': boundary.polya_start if boundary else np.nan,
            'polya_end': boundary.polya_end if boundary else np.nan,
            'tail_samples': result.tail_samples,
            'tail_seconds': round(result.tail_seconds, 4),
            'n_chunks': len(result.chunks),
            'n_encoded': len(result.gafs),
            'n_nonA': sum(1 for label, _ in result.predictions.values()
                          if label != self.reference_label),
            'class': read_class(result, self.reference_label),
            'comment': result.error_type if not result.ok else '',
        }
        self._read_rows.append(row)
        self.stats[f"class_{row['class']}"] += 1

        if not result.ok:
            self.stats['reads_failed'] += 1
            self.stats[f'failed_{result.error_type}'] += 1
            return
        self.stats['reads_processed'] += 1
        if not result.chunks:
            self.stats['reads_without_chunks'] += 1

        encoded = {g.chunk_name for g in result.gafs}
        for chunk in result.chunks:
            label, prob = result.predictions.get(chunk.name, ('', np.nan))
            self._chunk_rows.append({
                'read_id': chunk.read_id,
                'chunk_name': chunk.name,
                'index': chunk.index,
                'start': chunk.start,
                'end': chunk.end,
                'length': len(chunk),
                'encoded': chunk.name in encoded,
                'prediction': label,
                'probability': prob,
            })
        self.stats['chunks_total'] += len(result.chunks)
        self.stats['chunks_encoded'] += len(result.gafs)
        self.stats['chunks_skipped'] += len(result.skipped)
        if self.save_gafs:
            for g in result.gafs:
                self._gafs[g.chunk_name] = g.matrix

    def chunk_frame(self):
        df = pd.DataFrame(self._chunk_rows, columns=CHUNK_COLUMNS)
        return df.sort_values(['read_id', 'index'], kind='stable').reset_index(drop=True)

    def read_frame(self):
        df = pd.DataFrame(self._read_rows, columns=READ_COLUMNS)
        return df.sort_values('read_id', kind='stable').reset_index(drop=True)

    def stats_frame(self):
        return pd.DataFrame(sorted(self.stats.items()), columns=['stat', 'value'])

    def write(self, outdir, exp_tag):
        """Write TSV reports (and the GAF archive) into *outdir*.

        Returns:
            List of written file paths.
        """
        os.makedirs(outdir, exist_ok=True)
        written = []

        def _path(suffix):
            return os.path.join(outdir, f'{exp_tag}-{suffix}')

        for suffix, frame in (('chunks.tsv', self.chunk_frame()),
                              ('read_classes.tsv', self.read_frame()),
                              ('run_stats.tsv', self.stats_frame())):
            frame.to_csv(_path(suffix), sep='\t', index=False, na_rep='NA')
            written.append(_path(suffix))

        if self.save_gafs and self._gafs:
            np.savez_compressed(_path('gafs.npz'), **self._gafs)
            written.append(_path('gafs.npz'))
        return written
