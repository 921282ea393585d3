"""Elasticsearch runner.

Uses the snapshot REST API: a shared filesystem ("fs") repository is
registered on the cluster, and each pack writes one snapshot named after the
target into it. Snapshots stay in the cluster's repository; restore reads the
snapshot with the same name back.

Properties:
    Host: Required. Base URL of the cluster, e.g. http://localhost:9200
    RepositoryName: Snapshot repository name (default "snap")
    RepositoryPath: Repository location, must be listed in path.repo
        (default: the repository name, relative to path.repo)
    Indices: Index pattern to work on. Required for restore and clean;
        pack snapshots every index when absent.
    Username / Password: Optional basic authentication
"""

import logging

import requests

from ..__util__ import BackendError
from ..config.schema import TargetConfig
from ..core.naming import HOST
from .base import TargetRunner

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "snap"
INDICES = "Indices"


class ElasticsearchRunner(TargetRunner):
    """Pack, restore and clean Elasticsearch indices through snapshots."""

    type = "elasticsearch"

    def _session(self, target: TargetConfig) -> requests.Session:
        session = requests.Session()
        username = self.config.get_property(target, "Username")
        if username:
            session.auth = (username, self.config.get_property(target, "Password") or "")
        return session

    def _request(self, session, target: TargetConfig, method: str, path: str, **kwargs) -> dict:
        """Send a request to the cluster and return the decoded JSON body."""
        url = self.config.require_property(target, HOST).rstrip("/") + path
        logger.debug("%s %s", method, url)
        try:
            response = session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise BackendError(
                f"{method} {url} returned {response.status_code}: {response.text.strip()}"
            )
        try:
            return response.json()
        except ValueError:
            return {}

    def _repository(self, target: TargetConfig) -> str:
        return self.config.get_property(target, "RepositoryName") or DEFAULT_REPOSITORY

    def _indices(self, target: TargetConfig, required: bool = True) -> str:
        if required:
            return self.config.require_property(target, INDICES)
        return self.config.get_property(target, INDICES) or "*"

    def snapshot_name(self, target: TargetConfig) -> str:
        # snapshot names must be lowercase
        return self.artifact_name(target).lower()

    def display_name(self, target: TargetConfig) -> str:
        return self.snapshot_name(target)

    def ensure_repository(self, session, target: TargetConfig) -> str:
        """Register the fs snapshot repository; the cluster must acknowledge it."""
        repository = self._repository(target)
        location = self.config.get_property(target, "RepositoryPath") or repository
        body = self._request(
            session,
            target,
            "PUT",
            f"/_snapshot/{repository}",
            json={"type": "fs", "settings": {"location": location}},
        )
        if not body.get("acknowledged"):
            raise BackendError(
                f"Snapshot repository '{repository}' was not acknowledged by the cluster"
            )
        return repository

    def pack(self, target: TargetConfig) -> None:
        snapshot = self.snapshot_name(target)
        with self._session(target) as session:
            repository = self.ensure_repository(session, target)

            # a pack with the same inputs replaces the previous snapshot
            try:
                self._request(session, target, "DELETE", f"/_snapshot/{repository}/{snapshot}")
            except BackendError:
                logger.debug("No previous snapshot %s to replace", snapshot)

            logger.info("Creating snapshot %s in repository %s ...", snapshot, repository)
            body = self._request(
                session,
                target,
                "PUT",
                f"/_snapshot/{repository}/{snapshot}",
                params={"wait_for_completion": "true"},
                json={
                    "indices": self._indices(target, required=False),
                    "include_global_state": False,
                },
            )

        state = body.get("snapshot", {}).get("state")
        if state != "SUCCESS":
            raise BackendError(f"Snapshot {snapshot} was not accepted (state: {state})")
        logger.info("Packed snapshot %s", snapshot)

    def restore(self, target: TargetConfig) -> None:
        snapshot = self.snapshot_name(target)
        indices = self._indices(target)
        with self._session(target) as session:
            repository = self.ensure_repository(session, target)

            # open indices cannot be restored over
            self._request(
                session,
                target,
                "POST",
                f"/{indices}/_close",
                params={"ignore_unavailable": "true", "allow_no_indices": "true"},
            )

            logger.info("Restoring snapshot %s from repository %s ...", snapshot, repository)
            body = self._request(
                session,
                target,
                "POST",
                f"/_snapshot/{repository}/{snapshot}/_restore",
                params={"wait_for_completion": "true"},
                json={"indices": indices, "include_global_state": False},
            )

        shards = body.get("snapshot", {}).get("shards", {})
        if shards.get("failed", 0):
            raise BackendError(
                f"Restore of snapshot {snapshot} failed on {shards['failed']} shard(s)"
            )
        logger.info("Restored snapshot %s", snapshot)

    def clean(self, target: TargetConfig) -> None:
        indices = self._indices(target)
        logger.info("Deleting indices %s ...", indices)
        with self._session(target) as session:
            body = self._request(
                session,
                target,
                "DELETE",
                f"/{indices}",
                params={"ignore_unavailable": "true", "allow_no_indices": "true"},
            )
        if not body.get("acknowledged"):
            raise BackendError(f"Deletion of indices {indices} was not acknowledged")
