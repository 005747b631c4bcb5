"""
Console messages for pathdigest.

Everything diagnostic goes to stderr so that ``-o -`` can stream the digest
itself on stdout.
"""

from __future__ import annotations

import sys

from colorama import Fore, Style, init as colorama_init

colorama_init()

PREFIX = "[pathdigest]"


def _emit(msg: str, colour: str = "") -> None:
    line = f"{PREFIX} {msg}"
    if colour:
        line = colour + line + Style.RESET_ALL
    print(line, file=sys.stderr)


def info(msg: str, verbose: bool = False) -> None:
    """Progress message, shown only when *verbose* is set."""
    if verbose:
        _emit(msg)


def success(msg: str) -> None:
    _emit(msg, Fore.GREEN)


def warn(msg: str) -> None:
    _emit(f"! {msg}", Fore.YELLOW)


def error(msg: str) -> None:
    print(Fore.RED + f"Error: {msg}" + Style.RESET_ALL, file=sys.stderr)
