from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from headshot.config import get_settings
from headshot.infra.redis import close_redis, is_redis_available
from headshot.routes.batch import router as batch_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    close_redis()


app = FastAPI(lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=600,
)

app.include_router(batch_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "redis": "ok" if is_redis_available() else "unavailable"}
