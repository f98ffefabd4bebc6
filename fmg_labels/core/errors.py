"""
Label generation errors.

Configuration errors are fatal and raised before any state is processed.
Degenerate states and missing measurements are reported per state by the
generator and never abort a generation pass.
"""


class LabelError(Exception):
    """Base class for label placement errors."""


class LabelConfigurationError(LabelError, ValueError):
    """Invalid sampling configuration (non-positive angle or length step)."""


class DegenerateRegionError(LabelError):
    """Not enough usable rays to build a label path."""


class MeasurementUnavailableError(LabelError, RuntimeError):
    """Text or path length cannot be measured in the current context."""
