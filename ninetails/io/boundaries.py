# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Tail-boundary table (nanopolish ``polya`` output)."""

import logging as lg

import pandas as pd

from ..core.records import TailBoundary
from ..errors import BoundaryInconsistencyError, ConfigurationError

POSITION_COLUMNS = ['leader_start', 'adapter_start', 'polya_start', 'transcript_start']


def read_polya_table(path, qc_pass_only=True):
    """Load validated tail boundaries keyed by read id.

    Rows with missing positions, non-monotonic positions, a ``qc_tag`` other
    than ``PASS`` (when *qc_pass_only*) or a repeated read id are logged and
    dropped here, so the pipeline only ever sees valid records.

    Args:
        path: Tab-separated file with ``readname`` and the four position
            columns; ``qc_tag`` is optional.
        qc_pass_only: Keep only rows tagged ``PASS``.

    Returns:
        dict {read_id: TailBoundary} in file order.

    Raises:
        ConfigurationError: required columns are absent.
    """
    df = pd.read_csv(path, sep='\t')
    missing = [c for c in ['readname'] + POSITION_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigurationError(
            '{} lacks column(s): {}'.format(path, ', '.join(missing)))

    n_rows = len(df)
    if qc_pass_only and 'qc_tag' in df.columns:
        df = df[df['qc_tag'] == 'PASS']
        lg.info(f'{n_rows - len(df)} of {n_rows} tail records failed QC')

    df = df.dropna(subset=POSITION_COLUMNS)
    duplicated = df['readname'].duplicated(keep='first')
    if duplicated.any():
        lg.info(f'{int(duplicated.sum())} repeated read ids in {path}; keeping first records')
        df = df[~duplicated]

    boundaries = {}
    for row in df.itertuples(index=False):
        read_id = str(row.readname)
        try:
            boundaries[read_id] = TailBoundary(
                read_id, *(int(getattr(row, c)) for c in POSITION_COLUMNS))
        except BoundaryInconsistencyError as exc:
            lg.warning(f'Tail record rejected: {exc}')
    lg.info(f'Loaded {len(boundaries)} tail boundary records from {path}')
    return boundaries
