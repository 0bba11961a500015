import time

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dockhand.api import containers
from dockhand.core.config import Settings
from dockhand.core.logging import configure_logging
from dockhand.domain import errors
from dockhand.services.container_service import ContainerService
from dockhand.services.docker_runtime import DockerSDKRuntime
from dockhand.services.image_service import ImageService
from dockhand.services.log_service import LogService

# engine connection settings (DOCKER_HOST, TLS) may live in .env
load_dotenv()

settings = Settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = structlog.get_logger(__name__)

app = FastAPI(title="Dockhand – Container Control Plane")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(containers.router)


# ---------- Request logging ----------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    logger.info(
        "HTTP request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        response_time=time.time() - start_time,
    )
    return response


# ---------- Error mapping ----------

@app.exception_handler(errors.DockhandError)
async def dockhand_exception_handler(request: Request, exc: errors.DockhandError):
    content = {"message": exc.message}
    container_id = getattr(exc, "container_id", None)
    if container_id:
        content["id"] = container_id
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error", errors=exc.errors())
    return await dockhand_exception_handler(request, errors.ValidationError(str(exc)))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error", error=str(exc), exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/health")
async def health():
    return {"status": "ok"}


# ---------- Startup ----------

@app.on_event("startup")
async def startup_event():
    if getattr(app.state, "container_service", None) is not None:
        return

    try:
        docker_runtime = DockerSDKRuntime(settings)
    except Exception as exc:
        logger.critical("Cannot connect to container engine", error=str(exc))
        raise

    app.state.container_service = ContainerService(
        docker_runtime, ImageService(docker_runtime), settings
    )
    app.state.log_service = LogService(docker_runtime, settings)
    logger.info("Container engine connected")


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
