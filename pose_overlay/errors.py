"""Error types raised across the overlay pipeline."""


class OverlayError(Exception):
    """Base class for all pose_overlay errors."""


class AcquisitionError(OverlayError):
    """Camera or pose model could not be acquired. Fatal at startup."""


class EstimationError(OverlayError):
    """A single pose sample failed. Recovered by the render loop."""


class ConfigError(OverlayError):
    """Configuration file is malformed or holds invalid values."""
