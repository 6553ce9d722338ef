from explorer.core.config import settings
from explorer.core.session.workspace import Session

# The one dataset session this process serves
session = Session(
    default_query=settings.DEFAULT_QUERY,
    locate_binary=lambda: settings.ENGINE_EXTENSION_PATH,
    fetch_timeout=settings.FETCH_TIMEOUT_SECONDS,
)


# This is the "Bridge" that gives the routes access to the session
async def get_session():
    yield session
