# Copyright (c) Syntropy Systems
"""lgnet HTTP server for task submission and result lookup."""

from .app import create_app

__all__ = ["create_app"]
