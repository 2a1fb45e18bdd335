# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

"""CLI subcommand for classifier plugins."""


def list_classifiers(args):
    """List all installed chunk classifiers."""
    from ..plugins.registry import ClassifierRegistry

    available = ClassifierRegistry().discover().list_available()

    print('Classifiers:')
    if not available:
        print('  (none)')
    for name, info in sorted(available.items()):
        tag = ' (built-in)' if info.get('builtin') else ''
        desc = info.get('description', '')
        ver = info.get('version', '?')
        print(f"  {name:20s} v{ver:<10s} [{info.get('labels', '?')}] {desc}{tag}")
