#! /usr/bin/env python
# -*- coding: utf-8 -*-

# This file is part of Ninetails.
# Detection of non-adenosine residues in poly(A) tails from nanopore signal.
#
# Licensed under MIT License.

""" Main functionality of Ninetails

"""
import sys
import argparse

from ninetails import __version__
from .cli import classify as cli_classify
from .cli import plugins as cli_plugins
from .errors import ConfigurationError


USAGE = ''' %(prog)s <command> [<args>]

The most commonly used commands are:
   classify           Find non-adenosine residues in poly(A) tails
   list-classifiers   List installed chunk classifiers

'''


def main():
    if len(sys.argv) == 1:
        empty_parser = argparse.ArgumentParser(
            description='Poly(A) tail composition from nanopore raw signal',
            usage=USAGE,
        )
        empty_parser.print_help(sys.stderr)
        sys.exit(1)

    parser = argparse.ArgumentParser(
        description='Poly(A) tail composition from nanopore raw signal',
    )
    parser.add_argument('--version',
        action='version',
        version=__version__,
        default=__version__,
    )

    subparser = parser.add_subparsers(help='Sub-command help', dest='subcommand')

    ''' Parser for classify '''
    classify_parser = subparser.add_parser('classify',
        description='''Segment poly(A) tails into chunks, encode them as
                       Gramian Angular Fields and classify them''',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    cli_classify.ClassifyOptions.add_arguments(classify_parser)
    classify_parser.set_defaults(func=cli_classify.run)

    ''' Parser for list-classifiers '''
    list_parser = subparser.add_parser('list-classifiers',
        description='''List installed chunk classifiers''',
    )
    list_parser.set_defaults(func=cli_plugins.list_classifiers)

    args = parser.parse_args()
    try:
        args.func(args)
    except ConfigurationError as exc:
        print(f'ninetails: error: {exc}', file=sys.stderr)
        sys.exit(2)

if __name__ == '__main__':
    main()
