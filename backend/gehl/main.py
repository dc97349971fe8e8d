from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
import logging
import os

from gehl.api.routers import users, studies, surveys, locations, datapoints
from gehl.db import init_db
from gehl.errors import NotFoundError, ValidationError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Gehl Data Collection API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}


# 初回起動時にDBスキーマを作成
@app.on_event("startup")
def on_startup():
    init_db()


@app.exception_handler(ValidationError)
async def on_validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def on_not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(IntegrityError)
async def on_integrity_error(request: Request, exc: IntegrityError):
    # 詳細（SQL・パラメータ）はログ側にのみ出す
    logger.warning("integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "conflict with existing data"})


app.include_router(users.router,      prefix="/users",     tags=["users"])
app.include_router(studies.router,    prefix="/studies",   tags=["studies"])
app.include_router(surveys.router,    prefix="/surveys",   tags=["surveys"])
app.include_router(datapoints.router, prefix="/surveys",   tags=["datapoints"])
app.include_router(locations.router,  prefix="/locations", tags=["locations"])
