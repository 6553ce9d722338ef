from typing import Annotated, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from explorer.core import schemas
from explorer.core.database import get_session
from explorer.core.session.catalog import hint_tables
from explorer.core.session.workspace import Session

router = APIRouter(prefix="/catalog", tags=["Catalog"])

session_dep = Annotated[Session, Depends(get_session)]


def require_ready(session: Session):
    if session.state.load_state != schemas.LoadState.READY:
        raise HTTPException(status.HTTP_409_CONFLICT, "Dataset is not ready")


@router.get("", response_model=List[schemas.TableDescriptor])
async def get_catalog(session: session_dep):
    """Tables of the dataset with their parsed columns."""
    require_ready(session)
    return list(session.state.catalog)


@router.get("/hints", response_model=Dict[str, List[str]])
async def get_hints(session: session_dep):
    """Table -> column names, for editor autocompletion."""
    require_ready(session)
    return hint_tables(session.state.catalog)
