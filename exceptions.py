"""
Exception types for the HF Propagation Dashboard.
"""


class HFPropagationError(Exception):
    """Base class for all dashboard errors."""


class ValidationError(HFPropagationError):
    """User input (location, band, preset) is malformed."""


class OracleError(HFPropagationError):
    """The analysis oracle failed or answered with unusable data."""


class ForecastError(OracleError):
    """The extended forecast query failed."""


class OracleCancelledError(OracleError):
    """An oracle request was cancelled before its result could be used."""


class AnalysisInProgressError(HFPropagationError):
    """An analysis is already running for this session."""


class ExportError(HFPropagationError):
    """The export document could not be built or written."""
