from fastapi import Request

from dockhand.services.container_service import ContainerService
from dockhand.services.log_service import LogService


def get_container_service(request: Request) -> ContainerService:
    return request.app.state.container_service


def get_log_service(request: Request) -> LogService:
    return request.app.state.log_service
