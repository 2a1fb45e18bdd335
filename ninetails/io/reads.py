# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Read loaders.

Container formats are handled upstream; a loader only has to hand out
:class:`ReadSignal` objects by read id. Loaders are pickled into worker
processes, so they hold paths or plain data, never open file handles.
"""

import os
import zipfile
from abc import ABC, abstractmethod

import numpy as np

from ..core.records import ReadSignal
from ..errors import InvalidSignalError, ReadNotFoundError

# Scalar fields stored next to the ``signal`` and ``move`` arrays
READ_ATTRS = ('stride', 'called_events', 'digitisation', 'offset', 'range', 'sampling_rate')


class ReadLoader(ABC):
    """Source of :class:`ReadSignal` objects."""

    @abstractmethod
    def read_ids(self):
        """Sorted list of available read ids."""

    @abstractmethod
    def load(self, read_id) -> ReadSignal:
        """Return the read, or raise :class:`ReadNotFoundError`."""

    def __contains__(self, read_id):
        return read_id in set(self.read_ids())


class MemoryReadLoader(ReadLoader):
    """Serves reads already held in memory."""

    def __init__(self, reads):
        self._reads = {r.read_id: r for r in reads}

    def read_ids(self):
        return sorted(self._reads)

    def load(self, read_id):
        try:
            return self._reads[read_id]
        except KeyError:
            raise ReadNotFoundError('read not present in loader', key=read_id) from None


class NpzReadLoader(ReadLoader):
    """One ``<read_id>.npz`` archive per read inside *directory*.

    Each archive holds the arrays ``signal`` and ``move`` and the scalars
    listed in :data:`READ_ATTRS`.
    """

    def __init__(self, directory):
        if not os.path.isdir(directory):
            raise FileNotFoundError(f'read directory not found: {directory}')
        self.directory = directory

    def path(self, read_id):
        return os.path.join(self.directory, f'{read_id}.npz')

    def read_ids(self):
        return sorted(
            f[:-4] for f in os.listdir(self.directory) if f.endswith('.npz')
        )

    def __contains__(self, read_id):
        return os.path.exists(self.path(read_id))

    def load(self, read_id):
        path = self.path(read_id)
        if not os.path.exists(path):
            raise ReadNotFoundError(f'no archive at {path}', key=read_id)
        try:
            with np.load(path) as npz:
                missing = [k for k in ('signal', 'move') + READ_ATTRS if k not in npz.files]
                if missing:
                    raise InvalidSignalError(
                        'archive lacks {}'.format(', '.join(missing)), key=read_id)
                attrs = {k: npz[k].item() for k in READ_ATTRS}
                return ReadSignal(read_id, npz['signal'], npz['move'], **attrs)
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            raise InvalidSignalError(f'unreadable archive {path} ({exc})', key=read_id) from exc

    @staticmethod
    def save(directory, read):
        """Write *read* in the layout :meth:`load` expects."""
        os.makedirs(directory, exist_ok=True)
        attrs = {k: getattr(read, k) for k in READ_ATTRS}
        np.savez_compressed(
            os.path.join(directory, f'{read.read_id}.npz'),
            signal=read.signal, move=read.move, **attrs,
        )
