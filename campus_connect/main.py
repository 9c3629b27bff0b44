import logging
import os
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import firebase_admin
from contextlib import asynccontextmanager

from campus_connect.core.config import settings
from campus_connect.core.exceptions import CampusConnectError
from campus_connect.core.logging_config import setup_logging
from campus_connect.api.v1.api import api_router

setup_logging()
logger = logging.getLogger(__name__)


def init_firebase() -> None:
    if firebase_admin._apps:
        logger.info("Firebase app already initialized.")
        return
    if settings.FIRESTORE_EMULATOR_HOST:
        # The Firestore client reads the emulator address from the environment
        os.environ["FIRESTORE_EMULATOR_HOST"] = settings.FIRESTORE_EMULATOR_HOST
        logger.info(f"Using Firestore emulator at {settings.FIRESTORE_EMULATOR_HOST}")
    # Uses Application Default Credentials outside the emulator
    firebase_admin.initialize_app(options={'projectId': settings.GCP_PROJECT_ID})
    logger.info(f"Firebase Admin SDK initialized for project {settings.GCP_PROJECT_ID}.")


@asynccontextmanager
async def lifespan_context_manager(app: FastAPI):
    init_firebase()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for the college alumni and student network: profiles, connections, feed, messages and announcements.",
    version="0.1.0",
    lifespan=lifespan_context_manager
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(CampusConnectError)
async def campus_connect_error_handler(request: Request, exc: CampusConnectError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.to_dict()},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
    )


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
async def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}

@app.get("/health")
async def health_check():
    return {"status": "ok"}

if __name__== "__main__":
    port = int(os.environ.get("PORT", 8080))
    uvicorn.run("campus_connect.main:app", host="0.0.0.0", port=port, log_level="info", reload=True)
