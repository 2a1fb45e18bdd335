# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Gramian Angular Field encoding of tail chunks.

Each chunk is rescaled to [-1, 1], read as polar angles ``phi = arccos(x)``
and expanded into the pairwise fields

    GASF[i, j] = cos(phi_i + phi_j)
    GADF[i, j] = sin(phi_j - phi_i)

which are resized to ``N x N`` and stacked as two channels.
"""

import numpy as np
from scipy import ndimage

from ..errors import ConfigurationError, DegenerateSignalError
from .records import GAFMatrix

ON_DEGENERATE = ('raise', 'constant')


def rescale_minmax(values, key=None):
    """Min-max rescale *values* into [-1, 1].

    Raises:
        DegenerateSignalError: all values are equal.
    """
    x = np.asarray(values, dtype=np.float64)
    lo, hi = x.min(), x.max()
    if hi == lo:
        raise DegenerateSignalError(f'zero variance slice (value {lo:g})', key=key)
    scaled = ((x - hi) + (x - lo)) / (hi - lo)
    return np.clip(scaled, -1.0, 1.0)


def gramian_angular_fields(scaled):
    """Return ``(gasf, gadf)`` for a vector already scaled to [-1, 1]."""
    phi = np.arccos(np.clip(scaled, -1.0, 1.0))
    gasf = np.cos(phi[:, None] + phi[None, :])
    gadf = np.sin(phi[None, :] - phi[:, None])
    return gasf, gadf


def _resize(field, size):
    m = field.shape[0]
    if m == size:
        return field
    if m == 1:
        return np.full((size, size), field[0, 0])
    resized = ndimage.zoom(field, size / m, order=1)
    return np.clip(resized, -1.0, 1.0)


class GAFEncoder:
    """Encode chunks as ``size x size x 2`` GASF/GADF images.

    Args:
        size: Output side length N.
        on_degenerate: ``'raise'`` to reject zero-variance chunks with
            :class:`DegenerateSignalError`; ``'constant'`` to encode them as
            if every sample sat at the middle of the range (x = 0).
    """

    def __init__(self, size=100, on_degenerate='raise'):
        if size < 1:
            raise ConfigurationError(f'GAF size must be positive, got {size}')
        if on_degenerate not in ON_DEGENERATE:
            raise ConfigurationError(f"on_degenerate must be one of {ON_DEGENERATE}")
        self.size = int(size)
        self.on_degenerate = on_degenerate

    def fields(self, values, key=None):
        """Stacked ``(size, size, 2)`` float array for a 1-D slice."""
        values = np.asarray(values, dtype=np.float64)
        if values.size == 0:
            raise DegenerateSignalError('empty slice', key=key)
        try:
            scaled = rescale_minmax(values, key=key)
        except DegenerateSignalError:
            if self.on_degenerate == 'raise':
                raise
            scaled = np.zeros(values.size)
        gasf, gadf = gramian_angular_fields(scaled)
        return np.stack((_resize(gasf, self.size), _resize(gadf, self.size)), axis=-1)

    def encode(self, chunk):
        """Encode a :class:`Chunk` into a :class:`GAFMatrix`."""
        return GAFMatrix(chunk.name, self.fields(chunk.signal, key=chunk.name))
