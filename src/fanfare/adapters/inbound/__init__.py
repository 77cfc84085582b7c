"""Inbound adapters for the time-series store.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    CLI:
        - main: Entry point of the ``fanfare`` command
        - build_parser: The argparse parser of that command
"""

from fanfare.adapters.inbound.cli import build_parser, main

__all__ = [
    "build_parser",
    "main",
]
