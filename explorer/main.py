import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from explorer.core.config import settings
from explorer.core.database import session
from explorer.api.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL)


# Load the dataset in the background and close the handle once everything is done
@asynccontextmanager
async def lifespan(app: FastAPI):
    loading = asyncio.create_task(session.start(settings.DATASET_URL))

    yield

    if not loading.done():
        loading.cancel()
    session.close()


app = FastAPI(title="Dataset SQL Explorer", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    state = session.state
    return {
        "message": "Welcome to the Dataset SQL Explorer",
        "load_state": state.load_state.value,
    }
