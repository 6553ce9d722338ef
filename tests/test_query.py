import pytest

from explorer.core.errors import SessionNotReadyError
from explorer.core.schemas import QueryStatus
from explorer.core.session.workspace import Session


@pytest.mark.asyncio
async def test_sack_count(ready_session):
    """count(*) over a boolean column returns one row, one column"""
    state = ready_session.submit(
        "select count(*) as n from plays where is_sack = true"
    )

    assert state.query_status == QueryStatus.HAS_RESULT
    assert state.error is None
    assert state.current_result.columns == ("n",)
    assert state.current_result.rows == ((2,),)


@pytest.mark.asyncio
async def test_rows_match_column_count(ready_session):
    state = ready_session.submit("select * from plays order by play_id")

    result = state.current_result
    assert result.columns == ("play_id", "formation", "is_sack", "yards")
    assert len(result.rows) == 4
    assert all(len(row) == len(result.columns) for row in result.rows)
    assert result.rows[3] == (4, "PISTOL", 0, None)


@pytest.mark.asyncio
async def test_rejected_sql_keeps_engine_message(ready_session):
    state = ready_session.submit("select * from missing_table")

    assert state.query_status == QueryStatus.HAS_ERROR
    assert state.results is None
    assert state.error.message == "no such table: missing_table"


@pytest.mark.asyncio
async def test_syntax_error_message_verbatim(ready_session):
    state = ready_session.submit("selec 1")

    assert state.error.message == 'near "selec": syntax error'


@pytest.mark.asyncio
async def test_error_clears_stale_result(ready_session):
    """A failing query after a good one leaves only the error"""
    first = ready_session.submit("select abbr from teams")
    assert first.query_status == QueryStatus.HAS_RESULT

    second = ready_session.submit("select abbr from")

    assert second.query_status == QueryStatus.HAS_ERROR
    assert second.results is None
    assert second.current_result is None
    assert second.current_query == "select abbr from"


@pytest.mark.asyncio
async def test_result_clears_previous_error(ready_session):
    ready_session.submit("select nope")
    state = ready_session.submit("select 1 as one")

    assert state.error is None
    assert state.current_result.rows == ((1,),)


@pytest.mark.asyncio
async def test_first_result_is_current(ready_session):
    state = ready_session.submit("select 1 as a; select 'x;y' as b;")

    assert len(state.results) == 2
    assert state.current_result.columns == ("a",)
    assert state.results[1].rows == (("x;y",),)


@pytest.mark.asyncio
async def test_empty_select_keeps_columns(ready_session):
    state = ready_session.submit("select abbr, name from teams where 1 = 0")

    assert state.query_status == QueryStatus.HAS_RESULT
    assert state.current_result.columns == ("abbr", "name")
    assert state.current_result.rows == ()


@pytest.mark.asyncio
async def test_writes_are_rejected(ready_session):
    state = ready_session.submit("insert into teams values ('NE', 'New England')")

    assert state.query_status == QueryStatus.HAS_ERROR
    assert state.error.message == "not authorized"

    count = ready_session.submit("select count(*) from teams")
    assert count.current_result.rows == ((2,),)


@pytest.mark.asyncio
async def test_blob_cells_become_hex(ready_session):
    state = ready_session.submit("select x'0aff' as payload")

    assert state.current_result.rows == (("0aff",),)


def test_submit_before_ready_is_noop():
    session = Session()
    before = session.state

    with pytest.raises(SessionNotReadyError):
        session.submit("select 1")

    assert session.state is before
    assert session.state.current_query is None


@pytest.mark.asyncio
async def test_previous_snapshot_is_untouched(ready_session):
    first = ready_session.submit("select 1 as a")
    ready_session.submit("select broken from")

    assert first.query_status == QueryStatus.HAS_RESULT
    assert first.current_result.rows == ((1,),)


@pytest.mark.asyncio
async def test_query_only_cannot_be_switched_off(ready_session):
    """Turning query_only off is refused, so later DDL cannot run either"""
    state = ready_session.submit(
        "PRAGMA query_only = OFF; CREATE TABLE evil (x INT); DROP TABLE teams"
    )

    assert state.query_status == QueryStatus.HAS_ERROR
    assert state.error.message == "not authorized"

    ddl = ready_session.submit("DROP TABLE teams")
    assert ddl.query_status == QueryStatus.HAS_ERROR

    tables = ready_session.submit(
        "select name from sqlite_master where type = 'table' order by name"
    )
    assert tables.current_result.rows == (("plays",), ("teams",))


@pytest.mark.asyncio
async def test_attach_is_refused(ready_session, tmp_path):
    target = tmp_path / "created.db"

    state = ready_session.submit(f"ATTACH '{target}' AS x")

    assert state.query_status == QueryStatus.HAS_ERROR
    assert state.error.message == "not authorized"
    assert not target.exists()


@pytest.mark.asyncio
async def test_read_pragmas_still_work(ready_session):
    state = ready_session.submit("PRAGMA table_info(teams)")

    assert state.query_status == QueryStatus.HAS_RESULT
    assert [row[1] for row in state.current_result.rows] == ["abbr", "name"]
