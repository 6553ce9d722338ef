"""
Error taxonomy for the explorer session.

Load errors are fatal to a session and end up as the ``load_error`` string of
the session state. Query errors are recoverable and end up in the QueryError
slot. Neither escapes the core as an uncaught fault.
"""


class ExplorerError(Exception):
    """Base class for every error raised by the explorer core."""


# =========================
# Load failures
# =========================
class LoadError(ExplorerError):
    """The session could not reach the ready state."""


class EngineInitError(LoadError):
    pass


class DatasetFetchError(LoadError):
    pass


class DatasetOpenError(LoadError):
    pass


# =========================
# Query failures
# =========================
class EngineQueryError(ExplorerError):
    """The engine rejected a SQL text. ``message`` is the engine's own wording."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SessionNotReadyError(ExplorerError):
    """Raised when the database is used before the dataset finished loading."""

    def __init__(self, message: str = "Dataset is not ready"):
        super().__init__(message)
