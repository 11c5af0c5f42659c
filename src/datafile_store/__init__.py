"""Datafile Store - outbound file selection and space reclamation.

This package manages a local directory of data files awaiting transfer to
a peer device: it tells complete files from partial ones, picks the next
file to send according to the configured upload priority, and frees space
for inbound transfers by deleting stale partial files.
"""

from datafile_store.__main__ import main

__all__ = ["main"]
