# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Exception taxonomy.

Conversion and configuration errors are unrecoverable and propagate to
the caller. Numeric degeneracies never raise; they are floored locally.
Solver non-convergence is not an error (see TerminationReason).
"""

from __future__ import annotations


class HuewiseError(Exception):
    """Base class for all errors raised by huewise."""


class InvalidColorSpace(HuewiseError, ValueError):
    """An unknown color space, gamut or metric identifier was supplied."""

    def __init__(self, identifier: object, kind: str = "color space") -> None:
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"Unsupported {kind}: {identifier!r}")


class ConfigurationError(HuewiseError, ValueError):
    """An optimization configuration was rejected before any work began."""


class OptimizationCancelled(HuewiseError):
    """Cancellation arrived before any restart completed."""
