import logging
from typing import Callable, Optional

import httpx

from explorer.core.engine import init_engine
from explorer.core.schemas import (
    LoadState,
    QueryOutcomeResponse,
    SessionState,
    SessionView,
)
from explorer.core.session.catalog import SchemaIntrospector, hint_tables
from explorer.core.session.loading import DatasetLoader, EngineFactory
from explorer.core.session.query import QueryController
from explorer.core.state import SessionStore

logger = logging.getLogger(__name__)


def build_outcome(state: SessionState) -> QueryOutcomeResponse:
    return QueryOutcomeResponse(
        status=state.query_status,
        query=state.current_query,
        result=state.current_result,
        result_count=len(state.results or ()),
        error=state.error,
    )


class Session:
    """
    One dataset session: the store plus the loader, query controller and
    schema introspector that act on it.
    """

    def __init__(
        self,
        default_query: str = "",
        engine_factory: EngineFactory = init_engine,
        locate_binary: Optional[Callable[[], str]] = None,
        fetch_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.default_query = default_query
        self.store = SessionStore()
        self.loader = DatasetLoader(
            self.store,
            engine_factory=engine_factory,
            locate_binary=locate_binary,
            fetch_timeout=fetch_timeout,
            transport=transport,
        )
        self.queries = QueryController(self.store)
        self.introspector = SchemaIntrospector(self.store)
        self.store.subscribe(self.introspector.on_state_change)

    @property
    def state(self) -> SessionState:
        return self.store.state

    async def start(self, dataset_location: str) -> LoadState:
        return await self.loader.start(dataset_location)

    def submit(self, sql_text: str) -> SessionState:
        return self.queries.submit(sql_text)

    def view_model(self) -> SessionView:
        state = self.store.state
        return SessionView(
            load_state=state.load_state,
            load_error=state.load_error,
            dataset_location=state.dataset_location,
            default_query=self.default_query,
            outcome=build_outcome(state),
            catalog=list(state.catalog),
            hint_tables=hint_tables(state.catalog),
        )

    def close(self):
        database = self.store.state.database
        if database is not None:
            database.close()
            logger.info("Dataset handle closed")
