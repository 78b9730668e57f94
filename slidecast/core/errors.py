"""
Error kinds raised by SlideCast collaborators and the composition pipeline.
"""


class SlideCastError(Exception):
    """Base class for all SlideCast failures."""


class InputNotReadyError(SlideCastError):
    """Raised when a phase transition needs a source, narration track or page count."""


class ProbeError(SlideCastError):
    """Raised when the narration track duration cannot be determined."""


class RasterizationError(SlideCastError):
    """Raised when a document page cannot be read or rendered."""


class MediaIOError(SlideCastError):
    """Raised when a working directory or frame file cannot be created or written."""


class EncodingError(SlideCastError):
    """Raised when the slide video cannot be assembled."""


class CompositionError(SlideCastError):
    """Raised when the final composition fails."""


class TimingValidationError(SlideCastError, ValueError):
    """Raised when slide timings are structurally invalid."""


class PipelineCancelledError(SlideCastError):
    """Raised inside a render run whose results must be discarded."""
