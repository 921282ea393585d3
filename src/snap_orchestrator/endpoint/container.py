# pyright: standard

"""snap-orchestrator: snap_orchestrator/endpoint/container.py
Read and write files in the writable layer of a running Docker container.

The container is stopped around every copy so the backend does not touch the
file while it is being read or replaced, and started again right after.
"""

import contextlib
from pathlib import Path, PurePosixPath

import docker
from docker.errors import DockerException

from ..__logger__ import logger
from . import archive
from .common import ContainerResolutionError, Domain, Endpoint, TransferError

STOP_TIMEOUT = 10


def create_client():
    """Docker client configured from the environment (DOCKER_HOST etc.)."""
    try:
        return docker.from_env()
    except DockerException as e:
        raise TransferError(f"Cannot connect to the Docker daemon: {e}") from e


def _container_names(container) -> list[str]:
    names = container.attrs.get("Names") or []
    if container.name:
        names = [*names, container.name]
    return names


def matches(container, fragment: str) -> bool:
    """True if fragment is part of the id or ends one of the container names."""
    fragment_lower = fragment.lower()
    return fragment in container.id or any(
        name.lower().endswith(fragment_lower) for name in _container_names(container)
    )


class ContainerEndpoint(Endpoint):
    """A running container, found by id fragment or name suffix."""

    domain = Domain.CONTAINER

    def __init__(self, config=None, client=None, **kwargs) -> None:
        """
        Args:
            config (dict): Needs "container_id"; "stop_timeout" is optional.
            client: A docker.DockerClient, created from the environment if omitted.
        """
        super().__init__(config=config, **kwargs)
        if not self.config.get("container_id"):
            raise ContainerResolutionError("No container id or name given")
        self.config.setdefault("stop_timeout", STOP_TIMEOUT)
        self._client = client
        self._container = None

    @property
    def client(self):
        if self._client is None:
            self._client = create_client()
        return self._client

    def get_id(self) -> str:
        """Return an id string to identify this endpoint over multiple runs."""
        return str(self.config["container_id"])

    def resolve(self):
        """Find the single running container matching the configured id.

        Raises:
            ContainerResolutionError: If none or several containers match
        """
        if self._container is not None:
            return self._container

        fragment = self.get_id()
        try:
            candidates = self.client.containers.list()
        except DockerException as e:
            raise TransferError(f"Cannot list containers: {e}") from e

        found = [c for c in candidates if matches(c, fragment)]
        if not found:
            raise ContainerResolutionError(
                f"No running container matches '{fragment}'"
            )
        if len(found) > 1:
            raise ContainerResolutionError(
                f"Container '{fragment}' is ambiguous, it matches: "
                + ", ".join(c.name for c in found)
            )

        self._container = found[0]
        logger.debug("Resolved container %s to %s", fragment, self._container.id)
        return self._container

    def stop(self) -> None:
        container = self.resolve()
        logger.info("Stopping container %s ...", container.name)
        try:
            container.stop(timeout=self.config["stop_timeout"])
        except DockerException as e:
            raise TransferError(f"Failed to stop container {container.name}: {e}") from e

    def start(self) -> None:
        container = self.resolve()
        logger.info("Starting container %s ...", container.name)
        try:
            container.start()
        except DockerException as e:
            raise TransferError(f"Failed to start container {container.name}: {e}") from e

    @contextlib.contextmanager
    def stopped(self):
        """Keep the container stopped for the duration of the block."""
        self.stop()
        try:
            yield self.resolve()
        finally:
            self.start()

    def pull(self, source: str, destination: Path | str, extract_archive: bool = True) -> Path:
        """Copy a file out of the container.

        The archive Docker returns is stored next to destination as
        "<destination>.tar". With extract_archive the matching entry is
        written to destination and the archive is deleted.

        Returns:
            The extracted file, or the archive if extract_archive is False
        """
        destination = Path(destination)
        staging = destination.with_name(destination.name + ".tar")
        destination.parent.mkdir(parents=True, exist_ok=True)

        with self.stopped() as container:
            logger.info("Copying %s:%s -> %s", container.name, source, staging)
            try:
                bits, _stat = container.get_archive(str(source))
                with open(staging, "wb") as f:
                    for chunk in bits:
                        f.write(chunk)
            except DockerException as e:
                raise TransferError(
                    f"Failed to copy {source} out of {container.name}: {e}"
                ) from e

        if not extract_archive:
            return staging

        with archive.open_tar(staging) as tar:
            member = archive.find_entry(
                tar, destination.name, PurePosixPath(str(source)).name
            )
            if member is None:
                raise TransferError(
                    f"Archive {staging} has no entry named '{destination.name}'"
                )
            archive.extract_entry(
                tar, member, destination.parent, overwrite=True, name=destination.name
            )

        staging.unlink()
        return destination

    def push(self, source: Path | str, destination: str) -> None:
        """Copy a local file into the container at destination, replacing it."""
        source = Path(source)
        target = PurePosixPath(str(destination))
        staging = source.with_name(source.name + ".tar")
        if not source.is_file():
            raise TransferError(f"Nothing to copy, {source} does not exist")

        archive.create_tar([(target.name, source)], staging)
        try:
            with self.stopped() as container:
                logger.info("Copying %s -> %s:%s", source, container.name, target)
                try:
                    with open(staging, "rb") as data:
                        accepted = container.put_archive(str(target.parent), data)
                except DockerException as e:
                    raise TransferError(
                        f"Failed to copy {source} into {container.name}: {e}"
                    ) from e
                if not accepted:
                    raise TransferError(
                        f"Container {container.name} refused the archive for {target}"
                    )
        finally:
            staging.unlink(missing_ok=True)

    def exec(self, command: str | list[str]) -> tuple[int, str]:
        """Run a command inside the container and return (exit_code, output)."""
        container = self.resolve()
        logger.debug("Executing in %s: %s", container.name, command)
        try:
            result = container.exec_run(command)
        except DockerException as e:
            raise TransferError(f"Failed to execute in {container.name}: {e}") from e
        output = result.output.decode("utf-8", errors="replace") if result.output else ""
        return result.exit_code, output
