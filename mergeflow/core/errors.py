"""Custom exceptions used across MergeFlow."""


class MergeFlowError(Exception):
    """Base error for the application."""


class ConfigError(MergeFlowError):
    """Configuration related error."""


class DataSourceError(MergeFlowError):
    """Raised when the tabular data source cannot be read."""


class TemplateError(MergeFlowError):
    """Raised when the template PDF cannot be parsed or addressed."""


class FontError(MergeFlowError):
    """Raised when an overlay font cannot be resolved."""


class RenderError(MergeFlowError):
    """Raised when a merge fails while producing output."""
