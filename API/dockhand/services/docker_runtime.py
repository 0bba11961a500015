import asyncio
import threading
from typing import Any, Callable, Dict, List, Type

import requests
import structlog
from docker import from_env
from docker.errors import DockerException, NotFound
from docker.types import CancellableStream

from dockhand.core.config import Settings
from dockhand.domain import errors
from dockhand.domain.ports import ContainerEngine

logger = structlog.get_logger(__name__)


def _explain(exc: Exception) -> str:
    return getattr(exc, "explanation", None) or str(exc)


class DockerSDKRuntime(ContainerEngine):
    """
    Engine adapter over the docker SDK's low-level APIClient.

    Built once at startup and shared by every request. Blocking SDK calls run
    in worker threads and are bounded by a deadline; a missed deadline
    surfaces as errors.CancelledError.
    """

    def __init__(self, settings: Settings | None = None, client=None):
        self.settings = settings or Settings()
        self.docker_client = client or from_env()
        self.api = self.docker_client.api

    async def _call(
        self,
        fn: Callable,
        *args,
        error: Type[errors.EngineError] = errors.EngineError,
        missing: Type[errors.EngineError] = errors.NotFoundError,
        deadline: float | None = None,
        **kwargs,
    ):
        if deadline is None:
            deadline = self.settings.ENGINE_CALL_TIMEOUT
        operation = getattr(fn, "__name__", "engine call")
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args, **kwargs), timeout=deadline)
        except asyncio.TimeoutError:
            logger.error("Engine call timed out", operation=operation, deadline=deadline)
            raise errors.CancelledError(f"{operation} did not complete within {deadline}s")
        except NotFound as exc:
            logger.error("Engine object not found", operation=operation, error=_explain(exc))
            raise missing(_explain(exc)) from exc
        except (DockerException, requests.exceptions.RequestException) as exc:
            logger.error("Engine call failed", operation=operation, error=_explain(exc))
            raise error(_explain(exc)) from exc

    # -------------------------------
    # Containers
    # -------------------------------
    async def list_containers(self, all: bool = False) -> List[Dict[str, Any]]:
        return await self._call(self.api.containers, all=all)

    async def inspect_container(self, container_id: str) -> Dict[str, Any]:
        return await self._call(self.api.inspect_container, container_id)

    async def create_container(self, config: Dict[str, Any], name: str | None = None) -> Dict[str, Any]:
        return await self._call(
            self.api.create_container_from_config,
            config,
            name=name,
            error=errors.CreateError,
            missing=errors.CreateError,
        )

    async def start_container(self, container_id: str) -> None:
        await self._call(
            self.api.start,
            container_id,
            error=errors.StartError,
            missing=errors.StartError,
        )

    async def stop_container(self, container_id: str, timeout: int) -> None:
        # the engine may take the whole grace period before it kills
        await self._call(
            self.api.stop,
            container_id,
            timeout=timeout,
            error=errors.StopError,
            missing=errors.StopError,
            deadline=self.settings.ENGINE_CALL_TIMEOUT + timeout,
        )

    async def remove_container(self, container_id: str, *, force: bool, remove_volumes: bool) -> None:
        await self._call(
            self.api.remove_container,
            container_id,
            v=remove_volumes,
            force=force,
            error=errors.RemoveError,
            missing=errors.RemoveError,
        )

    async def container_stats(self, container_id: str) -> Dict[str, Any]:
        return await self._call(self.api.stats, container_id, stream=False)

    async def container_logs(
        self,
        container_id: str,
        *,
        tail: int,
        since: str | None,
        follow: bool,
    ) -> CancellableStream:
        return await self._call(self._open_logs, container_id, tail, since, follow)

    def _open_logs(self, container_id: str, tail: int, since: str | None, follow: bool) -> CancellableStream:
        """
        Hit the logs endpoint directly so `since` reaches the engine verbatim
        and `details` can be requested; the SDK's logs() supports neither.

        The body is relayed as the engine sends it. For non-TTY containers
        that keeps the multiplexed frame headers, which tell stdout from
        stderr per frame.

        Relies on private APIClient helpers (_url, _get, _raise_for_status,
        _stream_raw_result) as found in docker 7.x.
        """
        params = {
            "stdout": 1,
            "stderr": 1,
            "timestamps": 1,
            "details": 1,
            "follow": 1 if follow else 0,
            "tail": str(tail),
        }
        if since:
            params["since"] = since

        url = self.api._url("/containers/{0}/logs", container_id)
        # a follow stream can sit idle for any length of time
        response = self.api._get(url, params=params, stream=True, timeout=None if follow else self.api.timeout)
        try:
            self.api._raise_for_status(response)
        except Exception:
            response.close()
            raise
        output = self.api._stream_raw_result(response, chunk_size=None, decode=False)
        return CancellableStream(output, response)

    # -------------------------------
    # Images
    # -------------------------------
    async def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        return await self._call(self.api.inspect_image, image_ref)

    async def pull_image(self, image_ref: str) -> None:
        abort = threading.Event()
        try:
            await self._call(
                self._pull_and_drain,
                image_ref,
                abort,
                error=errors.PullError,
                missing=errors.PullError,
                deadline=self.settings.IMAGE_PULL_TIMEOUT,
            )
        finally:
            # stops the worker thread once the caller gave up on the pull
            abort.set()

    def _pull_and_drain(self, image_ref: str, abort: threading.Event) -> None:
        """Read the pull progress stream to its end. Progress is discarded."""
        events = self.api.pull(image_ref, stream=True, decode=True)
        try:
            for event in events:
                if abort.is_set():
                    logger.warning("Image pull abandoned", image=image_ref)
                    return
                if "error" in event:
                    detail = (event.get("errorDetail") or {}).get("message") or event["error"]
                    raise errors.PullError(detail)
        finally:
            events.close()
