#!/usr/bin/env python3
# SPDX-FileCopyrightText: Omar Sandoval <osandov@osandov.com>
# SPDX-License-Identifier: MIT

"""
Print out details about a wait(3C) status or a bash(1) return code.

usage: waitdecode [-b] STATUS

STATUS is an integer in C notation (decimal, 0x hex, or 0 octal) between 0
and 65535. With -b, it is interpreted as the return value of a simple command
in bash(1) rather than as a status from wait(3C).
"""

import enum
import os
import re
import signal
import sys
from typing import List, Optional, Sequence, Tuple


EXIT_USAGE = 2
STATUS_MAX = 0xffff
BASH_SIGNAL_BASE = 128

_INTEGER_RE = re.compile(
    r'[ \t\n\v\f\r]*(?P<sign>[+-]?)'
    r'(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))',
    re.ASCII)


class UsageError(Exception):
    pass


class Mode(enum.Enum):
    WAIT = 'wait(3C) status'
    BASH = 'bash return code'


def parse_status(text: str) -> int:
    # Same prefix rules as strtol() with base 0.
    match = _INTEGER_RE.match(text)
    if not match:
        raise UsageError(f'bad value: {text}')
    rest = text[match.end():]
    if rest:
        raise UsageError(f'unexpected characters: {rest}')

    if match.group('hex'):
        value = int(match.group('hex'), 16)
    elif match.group('oct'):
        value = int(match.group('oct'), 8)
    else:
        value = int(match.group('dec'))
    if match.group('sign') == '-':
        value = -value

    if value < 0:
        raise UsageError(f'value must be non-negative: {text}')
    if value > STATUS_MAX:
        raise UsageError(f'value too large: {text}')
    return value


def parse_args(argv: Sequence[str]) -> Tuple[Mode, int]:
    if not argv:
        raise UsageError('usage: waitdecode [-b] STATUS')

    if len(argv) > 1 and argv[0] == '-b':
        mode = Mode.BASH
        nargs = 2
    else:
        mode = Mode.WAIT
        nargs = 1

    if len(argv) > nargs:
        raise UsageError('unexpected arguments')

    return mode, parse_status(argv[nargs - 1])


def signal_name(signum: int) -> Optional[str]:
    """
    Return the name of a signal without the SIG prefix, or None if the
    platform doesn't know it. Real-time signals without a name of their own
    are named relative to SIGRTMIN or SIGRTMAX like sig2str(3C) does.
    """
    try:
        name = signal.Signals(signum).name
    except ValueError:
        pass
    else:
        return name[3:] if name.startswith('SIG') else name

    rtmin = getattr(signal, 'SIGRTMIN', None)
    rtmax = getattr(signal, 'SIGRTMAX', None)
    if rtmin is None or rtmax is None or not rtmin < signum < rtmax:
        return None
    if signum <= rtmin + (rtmax - rtmin) // 2:
        return f'RTMIN+{signum - rtmin}'
    return f'RTMAX-{rtmax - signum}'


def describe_signal(signum: int, verb: str) -> str:
    name = signal_name(signum)
    if name is None:
        return f'process {verb} on unknown signal {signum}'
    return f'process {verb} on SIG{name}'


def decode_wait(status: int) -> List[str]:
    """
    Decode a status as returned by wait(3C) and similar functions. See wait(2)
    and the wait.h documentation of your system for the bit layout.
    """
    lines = []
    # These should be exclusive for anything that really came from wait(),
    # but we report everything that matches and leave it to the user.
    if os.WIFEXITED(status):
        lines.append(
            f'process exited normally with exit status {os.WEXITSTATUS(status)}')

    if os.WIFSIGNALED(status):
        lines.append(describe_signal(os.WTERMSIG(status), 'terminated'))
        if os.WCOREDUMP(status):
            lines.append('core file created on termination')

    if os.WIFSTOPPED(status):
        lines.append(describe_signal(os.WSTOPSIG(status), 'stopped'))

    if os.WIFCONTINUED(status):
        lines.append('process continued')
    return lines


def decode_bash(status: int) -> List[str]:
    """
    Decode a return value as reported by bash(1) (see "Simple Commands").
    This only tells whether the command exited or was killed by a signal.
    """
    if status < BASH_SIGNAL_BASE:
        return [f'process terminated normally with exit status {status}']
    return [describe_signal(status - BASH_SIGNAL_BASE, 'terminated')]


def format_header(mode: Mode, status: int) -> str:
    return f'status: 0x{status:x} (decimal {status}), as {mode.value}'


def main(argv: Optional[Sequence[str]] = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    prog = os.path.basename(sys.argv[0]) or 'waitdecode'

    try:
        mode, status = parse_args(argv)
    except UsageError as e:
        print(f'{prog}: {e}', file=sys.stderr)
        sys.exit(EXIT_USAGE)

    print(format_header(mode, status))
    if mode is Mode.BASH:
        lines = decode_bash(status)
    else:
        lines = decode_wait(status)
    for line in lines:
        print('    ' + line)


if __name__ == '__main__':
    main()
