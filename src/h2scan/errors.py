"""Exception types raised by h2scan."""


class H2ScanError(Exception):
    """Base class for h2scan errors."""


class ConfigError(H2ScanError, ValueError):
    """Raised when scan configuration is invalid."""


class OutputSetupError(H2ScanError, OSError):
    """Raised when an output file cannot be opened before scanning."""
