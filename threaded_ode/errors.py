"""Exceptions raised by the integrators and the execution harness."""


class InvalidConfiguration(ValueError):
    """Raised when a problem or harness setting cannot produce a finite run."""


class WorkerFailure(RuntimeError):
    """
    A worker did not produce a result for its method.

    The original exception is kept both as ``cause`` and as ``__cause__``.
    """

    def __init__(self, method, cause):
        self.method = method
        self.cause = cause
        super().__init__(f"{method} worker failed: {type(cause).__name__}: {cause}")
        self.__cause__ = cause
