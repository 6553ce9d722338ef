from typing import Annotated, List

from fastapi import APIRouter, Depends

from explorer.core import schemas
from explorer.core.database import get_session
from explorer.core.session.workspace import Session

router = APIRouter(prefix="/session", tags=["Session"])

session_dep = Annotated[Session, Depends(get_session)]


@router.get("", response_model=schemas.SessionView)
async def get_session_view(session: session_dep):
    """Everything needed to render the dataset view."""
    return session.view_model()


@router.get("/load-log", response_model=List[schemas.LoadStepResponse])
async def get_load_log(session: session_dep):
    """Step-by-step log of the dataset loading run."""
    return session.loader.get_logs()
