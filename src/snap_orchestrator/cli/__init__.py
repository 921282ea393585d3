"""Command line interface for snap-orchestrator."""

from .dispatcher import create_parser, main

__all__ = ["create_parser", "main"]
