import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sunmile.infrastructure.db.lifecycle import datastore
from sunmile.interfaces.api.errors import register_exception_handlers
from sunmile.interfaces.api.routers import auth, pro_posts, professionals, users

FRONTEND_ORIGIN = os.environ.get("FRONTEND_ORIGIN", "https://sunmile.vercel.app")
API_PREFIX = os.environ.get("API_PREFIX", "/sunmile")


@asynccontextmanager
async def lifespan(_: FastAPI):
    datastore.ensure_initialized()
    try:
        yield
    finally:
        datastore.shutdown()


app = FastAPI(title="Sunmile API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
register_exception_handlers(app)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)
app.include_router(professionals.router, prefix=API_PREFIX)
app.include_router(pro_posts.router, prefix=API_PREFIX)
