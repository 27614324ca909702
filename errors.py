class AnalyzerError(Exception):
    """Base error for a failed wallet analysis. Carries the HTTP status to report."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(AnalyzerError):
    status_code = 400


class ConfigurationError(AnalyzerError):
    status_code = 500


class UpstreamError(AnalyzerError):
    """The data provider answered with a non-2xx status."""

    status_code = 502
