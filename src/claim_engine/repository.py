"""Charge repository boundary.

The persistence layer that owns charges, patients and providers is an
external collaborator. The engine only needs to resolve a charge id to its
aggregate.
"""

from typing import Protocol

from .schemas.charge import ChargeAggregate


class ChargeRepository(Protocol):
    """Resolves a charge id to its charge, patient and provider records."""

    def get_charge_aggregate(self, charge_id: str) -> ChargeAggregate | None:
        """Return the aggregate, or None when no such charge exists."""
        ...


class InMemoryChargeRepository:
    """Dictionary-backed repository for tests and embedding."""

    def __init__(self, aggregates: list[ChargeAggregate] | None = None) -> None:
        self._aggregates: dict[str, ChargeAggregate] = {}
        for aggregate in aggregates or []:
            self.add(aggregate)

    def add(self, aggregate: ChargeAggregate) -> None:
        self._aggregates[aggregate.charge.id] = aggregate

    def get_charge_aggregate(self, charge_id: str) -> ChargeAggregate | None:
        aggregate = self._aggregates.get(charge_id)
        # Hand out copies so callers cannot mutate the stored records
        return aggregate.model_copy(deep=True) if aggregate else None
