# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Keras classifier: runs a trained CNN over GASF/GADF chunk images."""

import logging as lg
import os

import numpy as np

from ... import __version__
from ...errors import ConfigurationError
from ..abc import Classifier


class KerasClassifier(Classifier):
    """Predict chunk classes with a saved Keras model (``--model``)."""

    def __init__(self):
        self.model_path = None
        self.batch_size = 256
        self._model = None

    @property
    def name(self) -> str:
        return 'keras'

    @property
    def description(self) -> str:
        return 'Keras CNN over stacked GASF/GADF images'

    @property
    def version(self) -> str:
        return __version__

    def configure(self, opts) -> None:
        self.model_path = getattr(opts, 'model', None)
        self.batch_size = getattr(opts, 'batch_size', None) or self.batch_size

    def load(self) -> None:
        if not self.model_path:
            raise ConfigurationError('the keras classifier needs --model')
        if not os.path.exists(self.model_path):
            raise ConfigurationError(f'model file not found: {self.model_path}')
        import keras

        lg.info(f'Loading keras model from {self.model_path}')
        self._model = keras.models.load_model(self.model_path, compile=False)

    def predict(self, batch):
        if self._model is None:
            raise ConfigurationError('keras classifier used before load()')
        probs = self._model.predict(np.asarray(batch, dtype=np.float32),
                                    batch_size=self.batch_size, verbose=0)
        return np.asarray(probs)
