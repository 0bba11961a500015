from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Container:
    """Read-time view of an engine container. Never cached."""
    id: str
    name: str
    image: str
    running: bool
    memory_limit: int = 0
    cpu_quota: int = 0
    nano_cpus: int = 0
    command: List[str] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_engine(cls, attrs: Dict[str, Any]) -> "Container":
        """
        Build from either an inspect document or a list summary.
        The two shapes differ in how name, image and state are reported.
        """
        config = attrs.get("Config") or {}
        host_config = attrs.get("HostConfig") or {}

        name = attrs.get("Name")
        if not name:
            names = attrs.get("Names") or [""]
            name = names[0]

        state = attrs.get("State")
        if isinstance(state, dict):
            running = bool(state.get("Running"))
        else:
            running = state == "running"

        command = config.get("Cmd")
        if command is None:
            command = attrs.get("Command", "").split() if attrs.get("Command") else []

        return cls(
            id=attrs.get("Id", ""),
            name=name.lstrip("/"),
            image=config.get("Image") or attrs.get("Image", ""),
            running=running,
            memory_limit=host_config.get("Memory") or 0,
            cpu_quota=host_config.get("CpuQuota") or 0,
            nano_cpus=host_config.get("NanoCpus") or 0,
            command=list(command),
            attrs=attrs,
        )


@dataclass
class SimpleHostConfig:
    port_bindings: Dict[int, List[int]] = field(default_factory=dict)
    resources: Dict[str, Any] = field(default_factory=dict)  # engine-native Resources keys
    auto_remove: bool = False


@dataclass
class SimpleCreateRequest:
    image: str
    name: str = ""
    cmd: List[str] = field(default_factory=list)
    host: SimpleHostConfig = field(default_factory=SimpleHostConfig)
    needs_gpu: bool = False  # accepted, not forwarded to the engine
    start_on_create: bool = False


@dataclass
class AdvancedCreateRequest:
    """Engine-native configs, forwarded without inspection."""
    name: str = ""
    config: Dict[str, Any] = field(default_factory=dict)
    host_config: Dict[str, Any] = field(default_factory=dict)
    network_config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CreateResult:
    id: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class LogQuery:
    tail: int = 50
    since: Optional[str] = None
    follow: bool = False


@dataclass
class ResourceUsage:
    ram_usage: float
    cpu_usage: float


@dataclass
class BasicContainerStatistics:
    name: str
    id: str
    image: str
    resource_usage: Optional[ResourceUsage]
    ram_total: float
    cpu_total: float
    start_cmd: str
    is_running: bool
