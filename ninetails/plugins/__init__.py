# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""Plugin infrastructure for Ninetails chunk classifiers."""

from .abc import Classifier  # noqa: F401
from .registry import ClassifierRegistry  # noqa: F401
