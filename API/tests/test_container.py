# tests/test_container.py
import time

import pytest
from unittest.mock import AsyncMock, MagicMock

from dockhand.core.config import Settings
from dockhand.domain import errors
from dockhand.domain.container import (
    AdvancedCreateRequest,
    SimpleCreateRequest,
    SimpleHostConfig,
)
from dockhand.services.container_service import ContainerService, build_simple_config
from dockhand.services.docker_runtime import DockerSDKRuntime


def make_service(**settings):
    docker_runtime = AsyncMock()
    docker_runtime.inspect_image = AsyncMock(return_value={"Id": "sha256:alpine"})
    docker_runtime.create_container = AsyncMock(return_value={"Id": "abc123", "Warnings": []})
    service = ContainerService(docker_runtime, settings=Settings(**settings))
    return service, docker_runtime


def simple_request(**overrides):
    fields = dict(
        image="alpine:latest",
        cmd=["echo", "hi"],
        name="t1",
        host=SimpleHostConfig(port_bindings={8080: [80]}, auto_remove=True),
        start_on_create=True,
    )
    fields.update(overrides)
    return SimpleCreateRequest(**fields)


def test_build_simple_config():
    config = build_simple_config(
        simple_request(
            host=SimpleHostConfig(
                port_bindings={8080: [80]},
                resources={"Memory": 268435456, "NanoCpus": 500000000},
                auto_remove=True,
            )
        )
    )

    assert config == {
        "Image": "alpine:latest",
        "Cmd": ["echo", "hi"],
        "Hostname": "t1",
        "ExposedPorts": {"80/tcp": {}},
        "HostConfig": {
            "Memory": 268435456,
            "NanoCpus": 500000000,
            "PortBindings": {"80/tcp": [{"HostIp": "", "HostPort": "8080"}]},
            "AutoRemove": True,
        },
    }


@pytest.mark.asyncio
async def test_create_simple_with_present_image_creates_and_starts():
    service, docker_runtime = make_service()

    result = await service.create_simple(simple_request())

    assert result.id == "abc123"
    docker_runtime.pull_image.assert_not_awaited()
    docker_runtime.create_container.assert_awaited_once()
    assert docker_runtime.create_container.await_args.kwargs["name"] == "t1"
    docker_runtime.start_container.assert_awaited_once_with("abc123")


@pytest.mark.asyncio
async def test_create_simple_pulls_before_create_when_image_missing():
    service, docker_runtime = make_service()
    calls = []
    docker_runtime.inspect_image = AsyncMock(side_effect=errors.NotFoundError("No such image"))
    docker_runtime.pull_image = AsyncMock(side_effect=lambda ref: calls.append("pull"))
    docker_runtime.create_container = AsyncMock(
        side_effect=lambda config, name=None: calls.append("create") or {"Id": "abc123"}
    )

    await service.create_simple(simple_request(start_on_create=False))

    assert calls == ["pull", "create"]


@pytest.mark.asyncio
async def test_create_simple_pull_failure_creates_nothing():
    service, docker_runtime = make_service()
    docker_runtime.inspect_image = AsyncMock(side_effect=errors.NotFoundError("No such image"))
    docker_runtime.pull_image = AsyncMock(side_effect=errors.PullError("manifest unknown"))

    with pytest.raises(errors.PullError):
        await service.create_simple(simple_request())

    docker_runtime.create_container.assert_not_awaited()
    docker_runtime.start_container.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_simple_without_start_on_create_never_starts():
    service, docker_runtime = make_service()

    await service.create_simple(simple_request(start_on_create=False))

    docker_runtime.start_container.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_simple_create_failure_never_starts():
    service, docker_runtime = make_service()
    docker_runtime.create_container = AsyncMock(side_effect=errors.CreateError("name already in use"))

    with pytest.raises(errors.CreateError):
        await service.create_simple(simple_request())

    docker_runtime.start_container.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_simple_start_failure_keeps_container():
    service, docker_runtime = make_service()
    docker_runtime.start_container = AsyncMock(side_effect=errors.StartError("port is already allocated"))

    with pytest.raises(errors.StartError) as excinfo:
        await service.create_simple(simple_request())

    assert excinfo.value.container_id == "abc123"
    assert excinfo.value.result.id == "abc123"
    assert "port is already allocated" in excinfo.value.message
    docker_runtime.remove_container.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_simple_start_timeout_keeps_container_id():
    service, docker_runtime = make_service()
    docker_runtime.start_container = AsyncMock(side_effect=errors.CancelledError("start did not complete within 0.05s"))

    with pytest.raises(errors.StartError) as excinfo:
        await service.create_simple(simple_request())

    assert excinfo.value.container_id == "abc123"
    assert excinfo.value.result.id == "abc123"
    docker_runtime.remove_container.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_simple_slow_engine_start_keeps_container_id():
    client = MagicMock()
    client.api.inspect_image.return_value = {"Id": "sha256:alpine"}
    client.api.create_container_from_config.return_value = {"Id": "abc123", "Warnings": []}
    client.api.start.side_effect = lambda container_id: time.sleep(0.3)
    settings = Settings(ENGINE_CALL_TIMEOUT=0.05)
    service = ContainerService(DockerSDKRuntime(settings, client=client), settings=settings)

    with pytest.raises(errors.StartError) as excinfo:
        await service.create_simple(simple_request())

    assert excinfo.value.container_id == "abc123"
    client.api.remove_container.assert_not_called()


@pytest.mark.asyncio
async def test_create_passes_native_configs_through():
    service, docker_runtime = make_service()
    req = AdvancedCreateRequest(
        name="web",
        config={"Image": "nginx:latest"},
        host_config={"Privileged": False},
        network_config={"EndpointsConfig": {}},
    )

    await service.create(req)

    docker_runtime.inspect_image.assert_not_awaited()
    docker_runtime.pull_image.assert_not_awaited()
    docker_runtime.start_container.assert_not_awaited()
    docker_runtime.create_container.assert_awaited_once_with(
        {
            "Image": "nginx:latest",
            "HostConfig": {"Privileged": False},
            "NetworkingConfig": {"EndpointsConfig": {}},
        },
        name="web",
    )


@pytest.mark.asyncio
async def test_stop_uses_configured_grace_period():
    service, docker_runtime = make_service(STOP_TIMEOUT=3)

    await service.stop_container("abc123")

    docker_runtime.stop_container.assert_awaited_once_with("abc123", timeout=3)


@pytest.mark.asyncio
async def test_remove_passes_flags_unchanged():
    service, docker_runtime = make_service()

    await service.remove_container("abc123", force=True, remove_volumes=False)

    docker_runtime.remove_container.assert_awaited_once_with(
        "abc123", force=True, remove_volumes=False
    )


@pytest.mark.asyncio
async def test_get_container_maps_not_found():
    service, docker_runtime = make_service()
    docker_runtime.inspect_container = AsyncMock(side_effect=errors.NotFoundError("No such container: nope"))

    with pytest.raises(errors.NotFoundError):
        await service.get_container("nope")


@pytest.mark.asyncio
async def test_list_containers_builds_views_from_summaries():
    service, docker_runtime = make_service()
    docker_runtime.list_containers = AsyncMock(
        return_value=[
            {"Id": "abc123", "Names": ["/t1"], "Image": "alpine:latest", "State": "running", "Command": "echo hi"}
        ]
    )

    containers = await service.list_containers()

    assert len(containers) == 1
    assert containers[0].name == "t1"
    assert containers[0].running is True
    assert containers[0].command == ["echo", "hi"]
    docker_runtime.list_containers.assert_awaited_once_with(all=False)


def inspect_document(running: bool):
    return {
        "Id": "abc123",
        "Name": "/t1",
        "Config": {"Image": "alpine:latest", "Cmd": ["sleep", "60"]},
        "HostConfig": {"Memory": 1048576, "NanoCpus": 500000000},
        "State": {"Running": running},
    }


@pytest.mark.asyncio
async def test_container_statistics_for_running_container():
    service, docker_runtime = make_service()
    docker_runtime.inspect_container = AsyncMock(return_value=inspect_document(running=True))
    docker_runtime.container_stats = AsyncMock(
        return_value={"memory_stats": {"usage": 2048}, "cpu_stats": {"cpu_usage": {"total_usage": 99}}}
    )

    stats = await service.container_statistics("abc123")

    assert stats.name == "t1"
    assert stats.start_cmd == "sleep 60"
    assert stats.ram_total == 1048576.0
    assert stats.cpu_total == 500000000.0
    assert stats.resource_usage.ram_usage == 2048.0
    assert stats.resource_usage.cpu_usage == 99.0
    assert stats.is_running is True


@pytest.mark.asyncio
async def test_container_statistics_skips_usage_when_stopped():
    service, docker_runtime = make_service()
    docker_runtime.inspect_container = AsyncMock(return_value=inspect_document(running=False))

    stats = await service.container_statistics("abc123")

    assert stats.resource_usage is None
    assert stats.is_running is False
    docker_runtime.container_stats.assert_not_awaited()
