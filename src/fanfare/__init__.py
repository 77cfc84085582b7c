"""
Fanfare - append-only columnar time-series store

Stores timestamped numeric records for named series in an ordered,
transactional key-value engine (LMDB) and reads them back, optionally
filtered by series name.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
