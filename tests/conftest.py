"""Pytest configuration and shared fixtures."""

import io
import json
import tarfile
from pathlib import PurePosixPath
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from snap_orchestrator.config import parse_config


@pytest.fixture
def sample_config_data():
    """Return a sample configuration as decoded JSON."""
    return {
        "name": "shop",
        "properties": {"Host": "http://search:9200"},
        "targets": [
            {
                "name": "orders",
                "type": "mssql",
                "isRunningInDocker": True,
                "properties": {
                    "ConnectionString": "Server=db1;Database=Orders;User Id=sa;Password=pw",
                    "ContainerId": "mssql",
                },
                "pack": {"enable": True},
                "unpack": {"enable": True},
                "clean": {"enable": True},
            },
            {
                "name": "search",
                "type": "elasticsearch",
                "pack": {"enable": True},
                "unpack": {"enable": False},
                "clean": {"enable": True},
            },
        ],
    }


@pytest.fixture
def sample_config(sample_config_data, tmp_path):
    """Return a parsed SnapConfig rooted at tmp_path."""
    return parse_config(
        sample_config_data,
        configuration_directory=str(tmp_path),
        configuration_file="snap.json",
    )


@pytest.fixture
def config_file(tmp_path, sample_config_data):
    """Write snap.json into a temporary directory and return its path."""
    path = tmp_path / "snap.json"
    path.write_text(json.dumps(sample_config_data, indent=2))
    return path


@pytest.fixture
def artifact_dir(tmp_path):
    """Create a temporary artifact store."""
    path = tmp_path / "artifacts"
    path.mkdir()
    return path


def make_tar(files):
    """Build an in-memory tar from {name: bytes}."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeContainer:
    """Stands in for docker.models.containers.Container.

    Files live in ``files`` keyed by absolute POSIX path; get_archive and
    put_archive speak real tar.
    """

    def __init__(self, container_id, name, files=None):
        self.id = container_id
        self.name = name
        self.attrs = {"Names": [f"/{name}"]}
        self.files = dict(files or {})
        self.running = True
        self.calls = []
        self.stop = MagicMock(side_effect=self._stop)
        self.start = MagicMock(side_effect=self._start)

    def _stop(self, timeout=None):
        self.calls.append(("stop", timeout))
        self.running = False

    def _start(self):
        self.calls.append(("start",))
        self.running = True

    def get_archive(self, path):
        self.calls.append(("get_archive", path))
        assert not self.running, "copied while running"
        data = self.files[path]
        payload = make_tar({PurePosixPath(path).name: data})
        # docker streams the archive in chunks
        chunks = [payload[i : i + 512] for i in range(0, len(payload), 512)]
        return iter(chunks), {"name": PurePosixPath(path).name, "size": len(data)}

    def put_archive(self, path, data):
        self.calls.append(("put_archive", path))
        assert not self.running, "copied while running"
        raw = data.read() if hasattr(data, "read") else data
        with tarfile.open(fileobj=io.BytesIO(raw)) as tar:
            for member in tar.getmembers():
                self.files[str(PurePosixPath(path) / member.name)] = tar.extractfile(
                    member
                ).read()
        return True

    def exec_run(self, command):
        self.calls.append(("exec_run", command))
        return SimpleNamespace(exit_code=0, output=b"ok\n")


@pytest.fixture
def fake_container():
    """A running fake container named 'shop_mssql'."""
    return FakeContainer("4f2a9c0b7d11e3", "shop_mssql")


@pytest.fixture
def docker_client(fake_container):
    """A docker client mock listing fake_container."""
    client = MagicMock()
    client.containers.list.return_value = [fake_container]
    return client
