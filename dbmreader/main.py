from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from dbmreader.api.cache import router as cache_router
from dbmreader.api.reader import router as reader_router
from dbmreader.api.widget import router as widget_router
from dbmreader.bootstrap import ReaderServices, build_services


def create_app(services: Optional[ReaderServices] = None) -> FastAPI:
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await services.close()

    app = FastAPI(title="DBM Reader", lifespan=lifespan)
    app.state.services = services
    app.include_router(reader_router, prefix="/chapters")
    app.include_router(widget_router, prefix="/widget")
    app.include_router(cache_router, prefix="/cache")
    return app
