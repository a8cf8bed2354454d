class PipelineError(Exception):
    """Base class for every failure a send can surface to the caller."""


class ConfigurationError(PipelineError):
    pass


class TransportError(PipelineError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(PipelineError):
    pass


class DecodeError(PipelineError):
    # raw_body is kept for diagnostics only and never rendered in str(error)
    def __init__(self, message: str, raw_body: str | None = None):
        super().__init__(message)
        self.raw_body = raw_body


class SessionBusyError(PipelineError):
    pass


class StaleSessionError(PipelineError):
    pass
