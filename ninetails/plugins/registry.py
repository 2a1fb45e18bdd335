# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Classifier discovery and instantiation."""

import logging as lg
from importlib.metadata import entry_points

from .abc import Classifier

ENTRY_POINT_GROUP = 'ninetails.classifiers'


class ClassifierRegistry:
    """Discovers chunk classifiers.

    Classifiers are registered via ``importlib.metadata.entry_points`` in the
    group ``ninetails.classifiers``.
    """

    def __init__(self):
        self._eps = {}  # name -> entry_point

    def discover(self):
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            self._eps[ep.name] = ep
        lg.debug(f'Discovered classifiers: {sorted(self._eps)}')
        return self

    @property
    def names(self):
        return sorted(self._eps)

    def get(self, name):
        """Instantiate the classifier registered as *name*.

        Returns:
            Classifier instance, or None when it is unknown or fails to load.
        """
        if name not in self._eps:
            lg.warning(f"Classifier '{name}' not found")
            return None
        try:
            instance = self._eps[name].load()()
        except Exception as exc:
            lg.warning(f"Failed to load classifier '{name}': {exc}", exc_info=True)
            return None
        if not isinstance(instance, Classifier):
            lg.warning(f"'{name}' is not a Classifier subclass, skipping")
            return None
        lg.info(f'Loaded classifier: {instance.name} v{instance.version}')
        return instance

    def list_available(self):
        """Return {name: info dict} for all discoverable classifiers."""
        available = {}
        for name, ep in self._eps.items():
            try:
                inst = ep.load()()
                available[name] = {
                    'version': inst.version,
                    'description': inst.description,
                    'labels': ','.join(inst.labels),
                    'builtin': ep.value.startswith('ninetails.plugins.builtin'),
                }
            except Exception as exc:
                lg.debug(f"Classifier '{name}' failed to load: {exc}")
                available[name] = {'version': '?', 'description': '(load failed)',
                                   'labels': '?', 'builtin': False}
        return available
