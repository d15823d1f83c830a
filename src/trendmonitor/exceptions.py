"""trendmonitor exceptions"""


class TrendMonitorError(Exception):
    """Base exception for trendmonitor"""

    pass


class ConfigError(TrendMonitorError):
    """Configuration could not be loaded or validated"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
