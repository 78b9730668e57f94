"""
SlideCast: narrated slide videos from a PDF deck and a narration recording.
"""

__version__ = "0.1.0"
