"""
Flashcards API

FastAPI application wiring the generation endpoints, logging and
shutdown of pooled connections.
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from flashcards.llm_client import close_session
from generations import router as generations_router, close_generation_store
from logs import setup_llm_logging

APP_NAME = "flashcards-api"
APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_llm_logging()
    try:
        yield
    finally:
        await close_session()
        await close_generation_store()


def create_app() -> FastAPI:
    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)

    app.include_router(generations_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "app": APP_NAME, "version": APP_VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
