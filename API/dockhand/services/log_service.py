import structlog

from dockhand.core.config import Settings
from dockhand.domain.container import LogQuery
from dockhand.domain.ports import ContainerEngine, LogStream

logger = structlog.get_logger(__name__)


def parse_tail_lines(raw, default: int = 50) -> int:
    """Lenient `lines` parsing: anything that is not an integer means `default`."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


class LogService:
    def __init__(self, docker_runtime: ContainerEngine, settings: Settings | None = None):
        self.docker_runtime = docker_runtime
        self.settings = settings or Settings()

    def build_query(self, lines=None, since: str | None = None, follow: bool = False) -> LogQuery:
        return LogQuery(
            tail=parse_tail_lines(lines, self.settings.DEFAULT_LOG_LINES),
            since=since or None,
            follow=follow,
        )

    async def get_logs(self, container_id: str, query: LogQuery) -> LogStream:
        """
        Open a log stream for a container.

        Follow mode never ends on its own; it lasts until the caller closes
        the returned stream or the engine drops the connection. The caller
        owns the stream and must close it.
        """
        logger.debug(
            "Opening log stream",
            container_id=container_id,
            tail=query.tail,
            since=query.since,
            follow=query.follow,
        )
        return await self.docker_runtime.container_logs(
            container_id,
            tail=query.tail,
            since=query.since,
            follow=query.follow,
        )
