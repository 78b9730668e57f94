"""
Configuration package for SlideCast.
"""

from .config import config

__all__ = ["config"]
