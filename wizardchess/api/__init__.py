"""Engine REST API: stateless endpoints over serialized game states."""

from wizardchess.api.dependencies import init_app

__all__ = [
    "init_app",
]
