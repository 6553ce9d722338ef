from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# A single result cell. SQLite itself never yields booleans, the model still
# accepts them so any engine adapter can be plugged in.
Cell = Optional[Union[bool, int, float, str]]


# =========================
# Enums
# =========================
class LoadState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"


class QueryStatus(str, Enum):
    NO_QUERY_YET = "no_query_yet"
    HAS_RESULT = "has_result"
    HAS_ERROR = "has_error"


class LoadStep(str, Enum):
    INIT = "init"
    FETCH = "fetch"
    OPEN = "open"
    READY = "ready"
    FAILED = "failed"


class DeclaredType(str, Enum):
    INT = "INT"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"


# =========================
# RESULTS
# =========================
class ResultSet(BaseModel):
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[Cell, ...], ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_row_width(self):
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} cells, expected {width}"
                )
        return self


class QueryError(BaseModel):
    message: str

    model_config = ConfigDict(frozen=True)


# =========================
# CATALOG
# =========================
class ColumnMetadata(BaseModel):
    name: str
    # None when the definition line had no type token
    declared_type: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def known_type(self) -> Optional[DeclaredType]:
        """The declared type as an enum member, or None for raw/absent tags."""
        if self.declared_type is None:
            return None
        try:
            return DeclaredType(self.declared_type.upper())
        except ValueError:
            return None


class TableDescriptor(BaseModel):
    name: str
    definition_text: str = ""
    columns: Tuple[ColumnMetadata, ...] = ()

    model_config = ConfigDict(frozen=True)


# =========================
# SESSION STATE
# =========================
class SessionState(BaseModel):
    """
    One immutable snapshot of the session.

    Two independent axes: ``load_state`` decides whether queries may run at
    all, ``query_status`` tracks the outcome of the latest submission.
    """

    load_state: LoadState = LoadState.LOADING
    load_error: Optional[str] = None
    dataset_location: Optional[str] = None
    # Live DatabaseHandle, only set when READY
    database: Optional[Any] = Field(default=None, exclude=True, repr=False)

    current_query: Optional[str] = None
    results: Optional[Tuple[ResultSet, ...]] = None
    error: Optional[QueryError] = None

    catalog: Tuple[TableDescriptor, ...] = ()

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def query_status(self) -> QueryStatus:
        if self.error is not None:
            return QueryStatus.HAS_ERROR
        if self.results is not None:
            return QueryStatus.HAS_RESULT
        return QueryStatus.NO_QUERY_YET

    @property
    def current_result(self) -> Optional[ResultSet]:
        """Only the first result of a multi-statement run is displayed/exported."""
        if not self.results:
            return None
        return self.results[0]


# =========================
# API / VIEW MODEL
# =========================
class QueryRequest(BaseModel):
    sql: str = Field(min_length=1)


class QueryOutcomeResponse(BaseModel):
    status: QueryStatus
    query: Optional[str] = None
    result: Optional[ResultSet] = None
    result_count: int = 0
    error: Optional[QueryError] = None


class LoadStepResponse(BaseModel):
    timestamp: str
    step: LoadStep
    load_state: LoadState
    message: str
    level: str
    elapsed_seconds: float


class SessionView(BaseModel):
    """Everything the presentation layer needs to render the dataset view."""

    load_state: LoadState
    load_error: Optional[str] = None
    dataset_location: Optional[str] = None
    default_query: str
    outcome: QueryOutcomeResponse
    catalog: List[TableDescriptor] = []
    hint_tables: Dict[str, List[str]] = {}
