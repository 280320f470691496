"""HTTP proxy exposing the console over ``/api``."""

from .main import create_app

__all__ = ["create_app"]
