from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from explorer.core.config import settings
from explorer.core.database import get_session
from explorer.core.session import export
from explorer.core.session.workspace import Session

router = APIRouter(prefix="/export", tags=["Export"])

session_dep = Annotated[Session, Depends(get_session)]


@router.get("", response_class=PlainTextResponse)
async def export_result(
    session: session_dep, separator: Literal["tab", "comma"] = "tab"
):
    """
    Download the current result as delimited text.
    Cells are not quoted, so separators inside cell text are written as-is.
    """
    result = session.state.current_result
    if result is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "No result to export")

    column_separator, _ = export.SEPARATORS[separator]
    body = export.serialize(
        result,
        column_separator=column_separator,
        row_separator="\n",
        null_sentinel=settings.EXPORT_NULL_SENTINEL,
    )
    filename = export.export_filename(settings.EXPORT_FILENAME_STEM, separator)
    return PlainTextResponse(
        body,
        media_type="text/tab-separated-values" if separator == "tab" else "text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
