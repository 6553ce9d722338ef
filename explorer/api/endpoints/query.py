import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from explorer.core import schemas
from explorer.core.database import get_session
from explorer.core.errors import SessionNotReadyError
from explorer.core.session.workspace import Session, build_outcome

router = APIRouter(prefix="/query", tags=["Query"])

session_dep = Annotated[Session, Depends(get_session)]


# Run a query
@router.post(
    "",
    response_model=schemas.QueryOutcomeResponse,
    status_code=status.HTTP_200_OK,
)
async def run_query(payload: schemas.QueryRequest, session: session_dep):
    """
    Execute SQL against the loaded dataset.

    Engine rejections are not HTTP errors: they come back as an outcome with
    status "has_error" and the engine message.
    """
    try:
        state = session.submit(payload.sql)
    except SessionNotReadyError as error:
        logging.error(f"Query submitted before dataset was ready: {error}")
        raise HTTPException(status.HTTP_409_CONFLICT, str(error))

    return build_outcome(state)


# Latest outcome
@router.get("/result", response_model=schemas.QueryOutcomeResponse)
async def get_query_result(session: session_dep):
    state = session.state
    if state.query_status == schemas.QueryStatus.NO_QUERY_YET:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "No query submitted yet")

    return build_outcome(state)
