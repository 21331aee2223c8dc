"""Custom exception hierarchy for ploteq."""


class PlotEqError(Exception):
    """Base exception for all ploteq errors."""


class ParseError(PlotEqError):
    """Raised when plot document YAML parsing or schema deserialization fails."""


class ClassificationError(PlotEqError):
    """Raised when an expression cannot be classified into a plottable equation."""


class EmptyExpressionError(ClassificationError):
    """Raised when the expression text is empty."""


class InvalidVariablesError(ClassificationError):
    """Raised when no coordinate system or variable role matches the expression."""


class InvalidBinderFormError(InvalidVariablesError):
    """Raised when the left-hand side is not an accepted binder form."""


class UnsupportedDimensionError(ClassificationError):
    """Raised when the requested dimension is not 2 or 3."""


class ConfigurationError(ClassificationError):
    """Raised when the sampling resolution is out of range."""


class InvalidExpressionError(ClassificationError):
    """Raised when the rewritten expression fails the evaluator's syntax check."""


class SamplingError(PlotEqError):
    """Raised when sampling is aborted."""


class SamplingCancelledError(SamplingError):
    """Raised when sampling is cancelled between rows."""


class TopologyError(PlotEqError):
    """Raised when a curve network cannot be transposed or meshed."""


class ExportError(PlotEqError):
    """Raised when glTF/GLB export fails."""
