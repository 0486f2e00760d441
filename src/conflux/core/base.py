"""Base models shared by configuration and session state.

Kept apart from config.py so that log.py can build on them without
importing the full configuration tree.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything holding a resource released by close()."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Model that closes its Closeable fields when it is closed.

    Closing walks the model's fields and calls close() on every child
    that has one, so that closing the top-level Config shuts down the
    logger and its sinks. A failing child does not stop the others.
    The model is also a context manager that closes on exit.
    """

    def close(self):
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue
            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    print(
                        f"Warning: Error closing {field_name}: {e}",
                        file=sys.stderr,
                    )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for settings loaded from YAML, env or the CLI."""
    pass


class BaseState(BaseCloseable):
    """Marker base for state mutated while a session runs."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
