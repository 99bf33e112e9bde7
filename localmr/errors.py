class LocalMRError(Exception):
    """Base error for the LocalMR engine."""


class ConfigurationError(LocalMRError):
    """Missing or malformed job configuration, detected before any phase runs."""


class InputReadError(LocalMRError):
    def __init__(self, message: str, *, path=None):
        super().__init__(message)
        self.path = path


class OutputWriteError(LocalMRError):
    def __init__(self, message: str, *, path=None):
        super().__init__(message)
        self.path = path


class FinalizeError(LocalMRError):
    pass


class ContextClosedError(LocalMRError):
    pass


class TaskExecutionError(LocalMRError):
    """User logic failure inside one task. Stored on the task, never raised out of a phase."""

    def __init__(self, message: str, *, task_id=None, position=None):
        super().__init__(message)
        self.task_id = task_id
        self.position = position
