"""Shared execution context passed to every command."""

from collections import UserDict
from typing import Any


class Context(UserDict):
    """
    Mutable key-value store shared by all commands of one run.

    Commands communicate by reading and writing keys. The manager may seed
    it with bootstrap values before the first command runs.
    """

    def seed(self, values: dict[str, Any] | None = None, **kwargs: Any) -> "Context":
        """
        Set bootstrap values that are not already present.

        Args:
            values: Optional mapping of bootstrap values
            **kwargs: Additional bootstrap values

        Returns:
            The context itself, for chaining
        """
        merged = dict(values or {})
        merged.update(kwargs)
        for key, value in merged.items():
            if self.data.get(key) is None:
                self.data[key] = value
        return self
