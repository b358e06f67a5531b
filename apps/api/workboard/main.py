from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .routers import auth, board, health, prints, requests, uploads
from .models.request import Base
from .db import engine
from .core.settings import settings
from .services.poller import start_board_poller, stop_board_poller

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Work Board API")


@app.on_event("startup")
def on_startup():
    if settings.AUTO_DB_BOOTSTRAP:
        # Create the request table in dev if missing.
        Base.metadata.create_all(bind=engine)

    # 최초 1회 조회 후 15초마다 다시 조회 (POLL_ENABLED=false 면 최초 조회만)
    start_board_poller()


@app.on_event("shutdown")
def on_shutdown():
    stop_board_poller()


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(board.router)
app.include_router(requests.router)
app.include_router(prints.router)
app.include_router(uploads.router)

# CORS: allow local dev origins by default.
raw_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
)
allow_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
