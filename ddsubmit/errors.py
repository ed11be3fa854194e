"""Error taxonomy for the metric submission tool.

Every failure is fatal to the process: errors are raised where they are
detected and reported once by the entry point.
"""


class DDSubmitError(Exception):
    """Base class for all errors reported by ddsubmit."""


class ConfigError(DDSubmitError):
    """Credentials are missing, unsafe or malformed."""


class ValidationError(DDSubmitError):
    """Command-line input could not be turned into a metric."""


class SubmissionError(DDSubmitError):
    """The metric could not be serialized or sent."""
