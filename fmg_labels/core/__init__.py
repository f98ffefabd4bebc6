"""
Core state label placement functionality.
"""

from .errors import (
    DegenerateRegionError,
    LabelConfigurationError,
    LabelError,
    MeasurementUnavailableError,
)
from .labels import BurgLabel, CustomLabel, Label, LabelStore, StateLabel
from .map_context import Feature, MapContext, State
from .raycast import Direction, Ray, precalculate_angles
from .state_labels import GenerationReport, LabelOptions, StateLabelsGenerator
from .text_metrics import FixedWidthMeasurer, TextMeasurer

__all__ = ['DegenerateRegionError', 'LabelConfigurationError', 'LabelError',
           'MeasurementUnavailableError', 'BurgLabel', 'CustomLabel', 'Label',
           'LabelStore', 'StateLabel', 'Feature', 'MapContext', 'State',
           'Direction', 'Ray', 'precalculate_angles', 'GenerationReport',
           'LabelOptions', 'StateLabelsGenerator', 'FixedWidthMeasurer', 'TextMeasurer']
