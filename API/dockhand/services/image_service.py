import structlog

from dockhand.domain import errors
from dockhand.domain.ports import ContainerEngine

logger = structlog.get_logger(__name__)


class ImageService:
    def __init__(self, docker_runtime: ContainerEngine):
        self.docker_runtime = docker_runtime

    async def ensure_image(self, image_ref: str) -> None:
        """
        Make sure `image_ref` exists locally, pulling it only on a miss.

        The pull progress stream is drained to completion before returning,
        since the end of the stream is the engine's completion signal.
        Raises PullError when the pull fails.
        """
        try:
            await self.docker_runtime.inspect_image(image_ref)
            return
        except errors.NotFoundError:
            logger.info("Image not present locally, pulling", image=image_ref)

        await self.docker_runtime.pull_image(image_ref)
        logger.info("Image pulled", image=image_ref)
