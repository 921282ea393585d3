"""snap-orchestrator: snap_orchestrator/__init__.py."""


__version__ = "0.3.0"


def sanitize_name(name: str) -> str:
    """Replace path-unsafe characters ('/', '\\' and '.') with '_'"""
    return name.replace("/", "_").replace("\\", "_").replace(".", "_")
