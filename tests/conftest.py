import sqlite3

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from explorer.main import app
from explorer.core.database import get_session
from explorer.core.session.workspace import Session

DATASET_SCRIPT = """
CREATE TABLE plays (
  play_id INT,
  formation TEXT,
  is_sack BOOLEAN,
  yards INT
);
CREATE TABLE teams (
  abbr TEXT,
  name TEXT
);
INSERT INTO plays VALUES (1, 'SHOTGUN', TRUE, -7);
INSERT INTO plays VALUES (2, 'SHOTGUN', FALSE, 12);
INSERT INTO plays VALUES (3, 'UNDER CENTER', TRUE, -4);
INSERT INTO plays VALUES (4, 'PISTOL', FALSE, NULL);
INSERT INTO teams VALUES ('KC', 'Kansas City');
INSERT INTO teams VALUES ('SF', 'San Francisco');
"""


def make_image(script: str) -> bytes:
    """Build a SQLite database image in memory and return its bytes."""
    conn = sqlite3.connect(":memory:")
    try:
        conn.executescript(script)
        conn.commit()
        return conn.serialize()
    finally:
        conn.close()


@pytest.fixture
def dataset_bytes() -> bytes:
    return make_image(DATASET_SCRIPT)


# Write the dataset image to a temp file the loader can read
@pytest.fixture
def dataset_file(tmp_path, dataset_bytes):
    path = tmp_path / "pbp_test.sqlite"
    path.write_bytes(dataset_bytes)
    return path


# Session that already went through loading
@pytest_asyncio.fixture(scope="function")
async def ready_session(dataset_file):
    session = Session(default_query="select 1")
    await session.start(str(dataset_file))
    yield session
    session.close()


# Client
@pytest_asyncio.fixture(scope="function")
async def client(ready_session: Session):
    async def override_get_session():
        yield ready_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# Client bound to a session that never started loading
@pytest_asyncio.fixture(scope="function")
async def loading_client():
    idle_session = Session()

    async def override_get_session():
        yield idle_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
