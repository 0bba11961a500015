from dataclasses import asdict
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.concurrency import iterate_in_threadpool

from dockhand.api.dependencies import get_container_service, get_log_service
from dockhand.domain.ports import LogStream
from dockhand.services.container_service import ContainerService
from dockhand.services.log_service import LogService
from dockhand.schemas.container import (
    BasicContainerStatisticsResponse,
    ContainerResponse,
    CreateContainerRequest,
    CreateContainerResponse,
    SimpleCreateContainerRequest,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/containers", tags=["containers"])


def _flag(value: Optional[str]) -> bool:
    return value == "true"


# ---------------------------
# Reads
# ---------------------------
@router.get("", response_model=list[ContainerResponse])
@router.get("/list", response_model=list[ContainerResponse], include_in_schema=False)
async def list_containers(
    all: Optional[str] = Query(None, description="\"true\" to include stopped containers"),
    container_service: ContainerService = Depends(get_container_service),
):
    containers = await container_service.list_containers(all=_flag(all))
    return [ContainerResponse(**_summary(c)) for c in containers]


@router.get("/{container_id}")
async def get_container(
    container_id: str,
    container_service: ContainerService = Depends(get_container_service),
):
    container = await container_service.get_container(container_id)
    return container.attrs


@router.get("/{container_id}/stats", response_model=BasicContainerStatisticsResponse)
async def get_container_stats(
    container_id: str,
    container_service: ContainerService = Depends(get_container_service),
):
    stats = await container_service.container_statistics(container_id)
    return asdict(stats)


# ---------------------------
# Create
# ---------------------------
@router.post("/create_simple", response_model=CreateContainerResponse)
async def create_container_simple(
    payload: SimpleCreateContainerRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    result = await container_service.create_simple(payload.to_domain())
    return CreateContainerResponse(id=result.id, warnings=result.warnings)


@router.post("/create")
async def create_container(
    payload: CreateContainerRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.create(payload.to_domain())
    return payload.model_dump(by_alias=True)


# ---------------------------
# Lifecycle
# ---------------------------
@router.get("/{container_id}/start")
async def start_container(
    container_id: str,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.start_container(container_id)
    return container_id


@router.get("/{container_id}/stop")
async def stop_container(
    container_id: str,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.stop_container(container_id)
    return container_id


@router.delete("/{container_id}")
async def remove_container(
    container_id: str,
    force: Optional[str] = Query(None),
    remove_volumes: Optional[str] = Query(None),
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.remove_container(
        container_id, force=_flag(force), remove_volumes=_flag(remove_volumes)
    )
    return container_id


# ---------------------------
# Logs
# ---------------------------
@router.get("/{container_id}/logs")
async def get_container_logs(
    container_id: str,
    lines: Optional[str] = Query(None, description="Tail length, 50 when missing or not a number"),
    since: Optional[str] = Query(None, description="Passed to the engine as-is"),
    stream: Optional[str] = Query(None, description="\"true\" to follow"),
    log_service: LogService = Depends(get_log_service),
):
    query = log_service.build_query(lines, since, follow=_flag(stream))
    logs = await log_service.get_logs(container_id, query)
    return StreamingResponse(_relay(container_id, logs), media_type="application/octet-stream")


async def _relay(container_id: str, logs: LogStream):
    """Copy the engine stream to the client; the stream is closed however this ends."""
    try:
        async for chunk in iterate_in_threadpool(iter(logs)):
            yield chunk
    except Exception as exc:
        logger.error("Log relay failed", container_id=container_id, error=str(exc))
        raise
    finally:
        logs.close()


def _summary(container) -> dict:
    return {
        "id": container.id,
        "name": container.name,
        "image": container.image,
        "running": container.running,
        "memory_limit": container.memory_limit,
        "cpu_quota": container.cpu_quota,
        "nano_cpus": container.nano_cpus,
        "command": container.command,
    }
