import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from explorer.core.engine import Engine, init_engine
from explorer.core.errors import DatasetFetchError
from explorer.core.schemas import LoadState, LoadStep
from explorer.core.state import SessionStore


# -----------------------------------------------------------------------------
# LOADING MODULE - Session bootstrap
# Purpose: bring the session from nothing to a usable database handle, in order:
#          init engine -> fetch dataset image -> open image
# Why: queries must never see a half-loaded session
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)

EngineFactory = Callable[[Optional[Callable[[], str]]], Any]


# Load state the session is in while / after a step is logged
STEP_STATES = {
    LoadStep.READY: LoadState.READY,
    LoadStep.FAILED: LoadState.LOAD_FAILED,
}


class LoadLogger:
    """In-memory step log of one loading run, echoed to the module logger."""

    def __init__(self, dataset_location: str):
        self.dataset_location = dataset_location
        self.start_time = datetime.now()
        self.entries: List[Dict[str, Any]] = []

    def log(self, step: LoadStep, message: str, level: int = logging.INFO):
        now = datetime.now()
        self.entries.append(
            {
                "timestamp": now.isoformat(),
                "step": step,
                "load_state": STEP_STATES.get(step, LoadState.LOADING),
                "message": message,
                "level": logging.getLevelName(level).lower(),
                "elapsed_seconds": (now - self.start_time).total_seconds(),
            }
        )
        logger.log(level, f"[{self.dataset_location}] {step.value}: {message}")

    def get_logs(self) -> List[Dict[str, Any]]:
        return list(self.entries)


async def fetch_dataset(
    location: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    """
    Fetch the raw dataset image.

    Handles:
        - http(s) URLs (network errors, bad URLs and non-2xx statuses fail)
        - file:// URLs and plain filesystem paths

    Raises:
        DatasetFetchError
    """
    try:
        parsed = urlparse(location)
    except ValueError as exc:
        raise DatasetFetchError(f"Invalid dataset location {location}: {exc}") from exc

    if parsed.scheme in ("http", "https"):
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                response = await client.get(location)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            raise DatasetFetchError(
                f"HTTP {exc.response.status_code} while fetching {location}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DatasetFetchError(f"Failed to fetch {location}: {exc}") from exc

    path = Path(parsed.path) if parsed.scheme == "file" else Path(location)
    try:
        # Disk reads happen off the event loop
        return await asyncio.to_thread(path.read_bytes)
    except (OSError, ValueError) as exc:
        raise DatasetFetchError(f"Failed to read {path}: {exc}") from exc


class DatasetLoader:
    """
    Drives the load state of a session: LOADING -> READY | LOAD_FAILED.

    Both terminal states are final. ``start`` may run only once.
    """

    def __init__(
        self,
        store: SessionStore,
        engine_factory: EngineFactory = init_engine,
        locate_binary: Optional[Callable[[], str]] = None,
        fetch_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.engine_factory = engine_factory
        self.locate_binary = locate_binary
        self.fetch_timeout = fetch_timeout
        self.transport = transport

        self.engine: Optional[Engine] = None
        self.load_logger: Optional[LoadLogger] = None
        self._started = False

    async def start(self, dataset_location: str) -> LoadState:
        """
        Run init -> fetch -> open, publishing READY or LOAD_FAILED at the end.

        Any exception raised by a step ends the run in LOAD_FAILED.

        Returns:
            The terminal load state.
        """
        if self._started:
            raise RuntimeError("Dataset loading already started for this session")
        self._started = True

        self.load_logger = LoadLogger(dataset_location)
        self.store.update(load_state=LoadState.LOADING, dataset_location=dataset_location)

        try:
            self.load_logger.log(LoadStep.INIT, "Initializing engine...")
            self.engine = await self.engine_factory(self.locate_binary)

            self.load_logger.log(LoadStep.FETCH, f"Fetching dataset from {dataset_location}...")
            data = await fetch_dataset(
                dataset_location, timeout=self.fetch_timeout, transport=self.transport
            )
            self.load_logger.log(LoadStep.FETCH, f"Fetched {len(data)} bytes")

            self.load_logger.log(LoadStep.OPEN, "Opening dataset image...")
            database = self.engine.open(data)

        except Exception as e:
            reason = str(e) or type(e).__name__
            self.load_logger.log(LoadStep.FAILED, reason, logging.ERROR)
            self.store.update(load_state=LoadState.LOAD_FAILED, load_error=reason)
            return LoadState.LOAD_FAILED

        self.store.update(load_state=LoadState.READY, database=database)
        self.load_logger.log(LoadStep.READY, "Dataset ready for queries")
        return LoadState.READY

    def get_logs(self) -> List[Dict[str, Any]]:
        if self.load_logger is None:
            return []
        return self.load_logger.get_logs()
