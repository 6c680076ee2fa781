"""Exceptions raised by the site checker."""


class SeoCheckError(Exception):
    """Base class for errors that stop a scan from producing a report."""


class ConfigError(SeoCheckError):
    """Configuration could not be loaded."""


class ReportWriteError(SeoCheckError):
    """The report could not be written to its destination."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write report to {path}: {reason}")
