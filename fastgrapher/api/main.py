"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fastgrapher.api.routes import classify, config, health


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler.

    Loads the detector backends before serving and releases the classifier's
    worker pool on shutdown.
    """

    from fastgrapher.api.services.state import get_classifier, shutdown

    get_classifier()
    yield
    shutdown()


app = FastAPI(title="FastGrapher Vision API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(config.router)
app.include_router(classify.router)


if __name__ == "__main__":
    uvicorn.run("fastgrapher.api.main:app", host="0.0.0.0", port=8000, reload=True)
