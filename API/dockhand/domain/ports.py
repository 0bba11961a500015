from typing import Any, Dict, Iterator, List, Protocol


class LogStream(Protocol):
    """Caller-owned byte stream. Must be closed on every exit path."""

    def __iter__(self) -> Iterator[bytes]: ...

    def close(self) -> None: ...


class ContainerEngine(Protocol):
    # -------------------------------
    # Containers
    # -------------------------------
    async def list_containers(self, all: bool = False) -> List[Dict[str, Any]]:
        """Return the engine's container summaries."""
        ...

    async def inspect_container(self, container_id: str) -> Dict[str, Any]:
        """Return the engine's inspect document. Raises NotFoundError."""
        ...

    async def create_container(self, config: Dict[str, Any], name: str | None = None) -> Dict[str, Any]:
        """Create from an engine-native config. Returns {"Id", "Warnings"}."""
        ...

    async def start_container(self, container_id: str) -> None:
        ...

    async def stop_container(self, container_id: str, timeout: int) -> None:
        """Stop, letting the engine kill the container after `timeout` seconds."""
        ...

    async def remove_container(self, container_id: str, *, force: bool, remove_volumes: bool) -> None:
        ...

    async def container_stats(self, container_id: str) -> Dict[str, Any]:
        """One-shot resource usage snapshot."""
        ...

    async def container_logs(
        self,
        container_id: str,
        *,
        tail: int,
        since: str | None,
        follow: bool,
    ) -> LogStream:
        """Open a combined stdout/stderr stream with timestamps and details."""
        ...

    # -------------------------------
    # Images
    # -------------------------------
    async def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        """Return image metadata. Raises NotFoundError when absent locally."""
        ...

    async def pull_image(self, image_ref: str) -> None:
        """Pull and drain the progress stream to completion. Raises PullError."""
        ...
