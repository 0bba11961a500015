from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dockhand.domain.container import (
    AdvancedCreateRequest,
    SimpleCreateRequest,
    SimpleHostConfig,
)


class SimpleHostConfigSchema(BaseModel):
    port_bindings: Dict[int, List[int]] = Field(
        default_factory=dict,
        description="Host port -> container ports it forwards to",
    )
    resources: Dict[str, Any] = Field(
        default_factory=dict,
        description="Engine-native resource limits, e.g. {\"Memory\": 268435456, \"NanoCpus\": 500000000}",
    )
    auto_remove: bool = False


class SimpleCreateContainerRequest(BaseModel):
    image: str = Field(..., description="Image reference, e.g. alpine:latest")
    cmd: List[str] = Field(default_factory=list)
    name: str = ""
    config: SimpleHostConfigSchema = Field(default_factory=SimpleHostConfigSchema)
    needs_gpu: bool = False
    start_on_create: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "image": "alpine:latest",
                "cmd": ["echo", "hi"],
                "name": "t1",
                "config": {"port_bindings": {"8080": [80]}, "auto_remove": True},
                "start_on_create": True,
            }
        }
    )

    def to_domain(self) -> SimpleCreateRequest:
        return SimpleCreateRequest(
            image=self.image,
            name=self.name,
            cmd=list(self.cmd),
            host=SimpleHostConfig(
                port_bindings={k: list(v) for k, v in self.config.port_bindings.items()},
                resources=dict(self.config.resources),
                auto_remove=self.config.auto_remove,
            ),
            needs_gpu=self.needs_gpu,
            start_on_create=self.start_on_create,
        )


class CreateContainerRequest(BaseModel):
    """Engine-native create body. The engine is the only validator of its contents."""
    name: str = Field("", alias="Name")
    config: Dict[str, Any] = Field(default_factory=dict, alias="Config")
    host_config: Dict[str, Any] = Field(default_factory=dict, alias="Host")
    network_config: Dict[str, Any] = Field(default_factory=dict, alias="Network")

    model_config = ConfigDict(populate_by_name=True)

    def to_domain(self) -> AdvancedCreateRequest:
        return AdvancedCreateRequest(
            name=self.name,
            config=self.config,
            host_config=self.host_config,
            network_config=self.network_config,
        )


class CreateContainerResponse(BaseModel):
    id: str
    warnings: List[str] = []


class ContainerResponse(BaseModel):
    id: str
    name: str
    image: str
    running: bool
    memory_limit: int
    cpu_quota: int
    nano_cpus: int
    command: List[str]


class ResourceUsageResponse(BaseModel):
    ram_usage: float
    cpu_usage: float


class BasicContainerStatisticsResponse(BaseModel):
    name: str
    id: str
    image: str
    resource_usage: Optional[ResourceUsageResponse] = None
    ram_total: float
    cpu_total: float
    start_cmd: str
    is_running: bool
