# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

__version__ = '0.1.0'
