# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import sys

import termcolor


def print_coloured(msg, colour, outfh=None):
    '''
    writes the given message to `outfh` (defaults to stdout), coloured using termcolor if `outfh`
    is a tty.
    '''
    if not msg:
        return
    if outfh is None:
        outfh = sys.stdout

    if not outfh.isatty():
        outfh.write(msg + '\n')
    else:
        outfh.write(termcolor.colored(msg, colour, force_color=True) + '\n')

    outfh.flush()


def error(msg=None):
    if msg:
        print_coloured('ERROR: ' + str(msg), colour='red', outfh=sys.stderr)
