# dockhand/services/container_service.py
from typing import Any, Dict, List

import structlog

from dockhand.core.config import Settings
from dockhand.domain import errors
from dockhand.domain.container import (
    AdvancedCreateRequest,
    BasicContainerStatistics,
    Container,
    CreateResult,
    ResourceUsage,
    SimpleCreateRequest,
)
from dockhand.domain.ports import ContainerEngine
from dockhand.services.image_service import ImageService
from dockhand.services.port_bindings import create_port_bindings, exposed_ports

logger = structlog.get_logger(__name__)


def build_simple_config(req: SimpleCreateRequest) -> Dict[str, Any]:
    """Assemble the engine-native create body for a simple create request."""
    bindings = create_port_bindings(req.host.port_bindings)

    host_config: Dict[str, Any] = dict(req.host.resources)
    host_config["PortBindings"] = bindings
    host_config["AutoRemove"] = req.host.auto_remove

    config: Dict[str, Any] = {"Image": req.image, "HostConfig": host_config}
    if req.cmd:
        config["Cmd"] = list(req.cmd)
    if req.name:
        config["Hostname"] = req.name
    if bindings:
        config["ExposedPorts"] = exposed_ports(bindings)
    return config


class ContainerService:
    def __init__(
        self,
        docker_runtime: ContainerEngine,
        image_service: ImageService | None = None,
        settings: Settings | None = None,
    ):
        self.docker_runtime = docker_runtime
        self.image_service = image_service or ImageService(docker_runtime)
        self.settings = settings or Settings()

    # -------------------------------
    # Reads
    # -------------------------------
    async def list_containers(self, all: bool = False) -> List[Container]:
        summaries = await self.docker_runtime.list_containers(all=all)
        return [Container.from_engine(s) for s in summaries]

    async def get_container(self, container_id: str) -> Container:
        attrs = await self.docker_runtime.inspect_container(container_id)
        return Container.from_engine(attrs)

    async def get_stats(self, container_id: str) -> Dict[str, Any]:
        """
        Raw resource usage snapshot. Does not check that the container is
        running; on a stopped container the engine decides what comes back.
        """
        return await self.docker_runtime.container_stats(container_id)

    async def container_statistics(self, container_id: str) -> BasicContainerStatistics:
        container = await self.get_container(container_id)

        usage = None
        if container.running:
            stats = await self.get_stats(container_id)
            usage = ResourceUsage(
                ram_usage=float((stats.get("memory_stats") or {}).get("usage", 0)),
                cpu_usage=float(
                    ((stats.get("cpu_stats") or {}).get("cpu_usage") or {}).get("total_usage", 0)
                ),
            )

        return BasicContainerStatistics(
            name=container.name,
            id=container.id,
            image=container.image,
            resource_usage=usage,
            ram_total=float(container.memory_limit),
            cpu_total=float(container.nano_cpus),
            start_cmd=" ".join(container.command),
            is_running=container.running,
        )

    # -------------------------------
    # Create
    # -------------------------------
    async def create_simple(self, req: SimpleCreateRequest) -> CreateResult:
        """
        Pull the image if missing, create the container and optionally start it.

        If the start fails the container is NOT removed: StartError carries
        its id and the creation result so the caller can retry or clean up.
        """
        config = build_simple_config(req)

        await self.image_service.ensure_image(req.image)

        response = await self.docker_runtime.create_container(config, name=req.name or None)
        result = CreateResult(id=response["Id"], warnings=list(response.get("Warnings") or []))
        logger.info("Container created", container_id=result.id, image=req.image, name=req.name)

        if req.start_on_create:
            try:
                await self.docker_runtime.start_container(result.id)
            except errors.DockhandError as exc:
                logger.warning(
                    "Container created but failed to start",
                    container_id=result.id,
                    error=exc.message,
                )
                raise errors.StartError(exc.message, container_id=result.id, result=result) from exc
            logger.info("Container started", container_id=result.id)

        return result

    async def create(self, req: AdvancedCreateRequest) -> None:
        """Create from caller-supplied engine configs. No pull, no start."""
        config = dict(req.config)
        config["HostConfig"] = req.host_config
        config["NetworkingConfig"] = req.network_config
        response = await self.docker_runtime.create_container(config, name=req.name or None)
        logger.info("Container created", container_id=response.get("Id"), name=req.name)

    # -------------------------------
    # Lifecycle
    # -------------------------------
    async def start_container(self, container_id: str) -> None:
        await self.docker_runtime.start_container(container_id)
        logger.info("Container started", container_id=container_id)

    async def stop_container(self, container_id: str) -> None:
        await self.docker_runtime.stop_container(container_id, timeout=self.settings.STOP_TIMEOUT)
        logger.info("Container stopped", container_id=container_id)

    async def remove_container(
        self,
        container_id: str,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> None:
        await self.docker_runtime.remove_container(
            container_id, force=force, remove_volumes=remove_volumes
        )
        logger.info(
            "Container removed",
            container_id=container_id,
            force=force,
            remove_volumes=remove_volumes,
        )
