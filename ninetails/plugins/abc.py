# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Abstract base class for chunk classifiers."""

from abc import ABC, abstractmethod


class Classifier(ABC):
    """Predicts the nucleotide class of GAF-encoded tail chunks.

    The platform calls :meth:`configure` with the parsed CLI options, then
    :meth:`load` once, then :meth:`predict` with ``(n, N, N, 2)`` batches.
    A loaded classifier is treated as read-only.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in CLI and entry-point registration."""

    @property
    def description(self) -> str:
        """One-line human-readable description."""
        return ""

    @property
    def version(self) -> str:
        return "0.0.0"

    @property
    def labels(self) -> tuple:
        """Class labels in the order of the prediction columns."""
        return ('A', 'C', 'G', 'U')

    @property
    def reference_label(self) -> str:
        """Label of an unmodified (adenosine) chunk."""
        return 'A'

    # -- Lifecycle -----------------------------------------------------------

    def configure(self, opts) -> None:
        """Receive parsed CLI opts."""

    def load(self) -> None:
        """Acquire the model. Called once before the first prediction."""

    @abstractmethod
    def predict(self, batch):
        """Return ``(n, len(labels))`` class probabilities for *batch*."""
