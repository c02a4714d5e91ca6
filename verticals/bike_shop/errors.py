"""Configurator exceptions.

Every exception carries a machine-readable `code`. Validation failures are
not exceptions; they come back as ValidationResult values.
"""

from typing import Iterable

from patterns.repository import RepositoryError


class ConfiguratorError(Exception):
    """Base exception for configurator errors."""

    code: str = "CONFIGURATOR_ERROR"


class NotFoundError(ConfiguratorError):
    """A product, part type or part option id does not exist (or is inactive)."""

    code: str = "NOT_FOUND"

    def __init__(self, entity: str, ids: Iterable[int]):
        self.entity = entity
        self.ids = sorted(set(ids))
        joined = ", ".join(str(i) for i in self.ids)
        super().__init__(f"{entity} not found: {joined}")


class DataAccessError(ConfiguratorError, RepositoryError):
    """A catalog or inventory store call failed. Never retried by the engine."""

    code: str = "DATA_ACCESS_ERROR"


class InsufficientStockError(ConfiguratorError):
    """A reservation could not decrement stock for one or more options."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, option_ids: Iterable[int]):
        self.option_ids = list(option_ids)
        super().__init__(
            f"Insufficient stock for part options: {self.option_ids}"
        )
