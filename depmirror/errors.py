"""
Errors — Base exception shared by every failure that aborts a run.
"""

from __future__ import annotations


class DepMirrorError(Exception):
    """Base class for all fatal depmirror errors."""
