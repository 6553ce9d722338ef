import logging

from explorer.core.errors import EngineQueryError, SessionNotReadyError
from explorer.core.schemas import LoadState, QueryError, SessionState
from explorer.core.state import SessionStore

logger = logging.getLogger(__name__)


class QueryController:
    """
    Executes user SQL against the ready database and records the outcome.

    Every submission replaces the previous outcome as a whole: afterwards
    exactly one of ``results`` / ``error`` is set on the snapshot.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def submit(self, sql_text: str) -> SessionState:
        """
        Run ``sql_text`` and publish the outcome.

        Raises:
            SessionNotReadyError: the dataset is not loaded, nothing changes
        """
        state = self.store.state
        if state.load_state != LoadState.READY or state.database is None:
            logger.warning(f"Query rejected, session is {state.load_state.value}")
            raise SessionNotReadyError()

        try:
            results = state.database.execute(sql_text)
        except EngineQueryError as e:
            logger.info(f"Query rejected by engine: {e.message}")
            return self.store.update(
                current_query=sql_text,
                results=None,
                error=QueryError(message=e.message),
            )

        logger.info(f"Query returned {len(results)} result set(s)")
        return self.store.update(
            current_query=sql_text, results=tuple(results), error=None
        )
