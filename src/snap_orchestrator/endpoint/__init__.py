# pyright: standard

"""snap-orchestrator: snap_orchestrator/endpoint/__init__.py."""

from pathlib import Path

from ..__logger__ import logger
from .common import ContainerResolutionError, Domain, Endpoint, TransferError
from .container import ContainerEndpoint
from .local import LocalEndpoint

__all__ = [
    "ContainerEndpoint",
    "ContainerResolutionError",
    "Domain",
    "Endpoint",
    "LocalEndpoint",
    "TransferError",
    "choose_endpoint",
    "move_virtual",
]


def choose_endpoint(domain: Domain, container_id=None, client=None, **kwargs) -> Endpoint:
    """
    Chooses the endpoint serving the given storage domain.

    Args:
        domain (Domain): Where the file lives.
        container_id (str): Id fragment or name suffix, required for containers.
        client: Optional docker client for container endpoints.

    Returns:
        Endpoint: An instance of the appropriate `Endpoint` subclass.
    """
    if domain is Domain.LOCAL:
        return LocalEndpoint(config=kwargs)
    if domain is Domain.CONTAINER:
        return ContainerEndpoint(
            config={"container_id": container_id, **kwargs}, client=client
        )
    raise ValueError(f"No endpoint could be generated for domain: {domain}")


def move_virtual(
    from_path: Path | str,
    from_domain: Domain,
    to_path: Path | str,
    to_domain: Domain,
    container_id=None,
    extract_archive: bool = True,
    client=None,
) -> bool:
    """
    Moves a file between storage domains (the local filesystem and a container).

    Args:
        from_path: Source file, in from_domain.
        from_domain: Domain of the source.
        to_path: Destination file, in to_domain.
        to_domain: Domain of the destination.
        container_id: The id, or an ending of a container name. Must match
            exactly one running container.
        extract_archive: When pulling, extract the file from the archive
            Docker returns instead of keeping "<to_path>.tar".
        client: Optional docker client.

    Returns:
        bool: False when a local move found nothing to move, True otherwise.

    Raises:
        NotImplementedError: For container to container moves.
        ContainerResolutionError: If the container cannot be identified.
        TransferError: If stopping, copying or starting fails.
    """
    if from_domain is Domain.LOCAL and to_domain is Domain.LOCAL:
        return LocalEndpoint().move(from_path, to_path)

    if from_domain is Domain.CONTAINER and to_domain is Domain.CONTAINER:
        raise NotImplementedError("Moving files between containers is not supported")

    endpoint = choose_endpoint(Domain.CONTAINER, container_id=container_id, client=client)
    logger.debug(
        "Moving %s (%s) -> %s (%s) via %r",
        from_path,
        from_domain.value,
        to_path,
        to_domain.value,
        endpoint,
    )

    if from_domain is Domain.CONTAINER:
        endpoint.pull(str(from_path), to_path, extract_archive=extract_archive)
    else:
        endpoint.push(from_path, str(to_path))
    return True
