"""
Runtime Configuration Module

Provides configuration loading and management for the commitment tree.
"""

from .runtime import (
    RuntimeConfig,
    TreeConfig,
)

__all__ = [
    "RuntimeConfig",
    "TreeConfig",
]
