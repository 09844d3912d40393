"""Customer persistence interface and an in-memory implementation."""

import copy
import uuid
from typing import Dict, List, Protocol

from .exceptions import CustomerNotFoundError
from .records import CustomerRecord


class CustomerRepository(Protocol):
    """What the ingestion and re-analysis pipelines need from storage."""

    def create(self, record: CustomerRecord, owner_id: str) -> str:
        """Persist a new customer and return its generated id."""
        ...

    def update_score(
        self,
        customer_id: str,
        churn_score: int,
        risk_level: str,
        risk_factors: List[str],
    ) -> None:
        """Overwrite the churn score, risk level and factors of a customer."""
        ...

    def list_customers(self, owner_id: str) -> List[CustomerRecord]:
        """All customers belonging to an owner."""
        ...


class InMemoryCustomerRepository:
    """Dictionary-backed repository for tests, the CLI and local runs."""

    def __init__(self):
        self._customers: Dict[str, CustomerRecord] = {}

    def create(self, record: CustomerRecord, owner_id: str) -> str:
        """Store a copy of the record under a new id."""
        customer_id = uuid.uuid4().hex
        stored = copy.deepcopy(record)
        stored.customer_id = customer_id
        stored.owner_id = owner_id
        self._customers[customer_id] = stored
        return customer_id

    def get(self, customer_id: str) -> CustomerRecord:
        try:
            return self._customers[customer_id]
        except KeyError:
            raise CustomerNotFoundError(customer_id) from None

    def update_score(
        self,
        customer_id: str,
        churn_score: int,
        risk_level: str,
        risk_factors: List[str],
    ) -> None:
        self.get(customer_id).apply_score(churn_score, risk_level, risk_factors)

    def list_customers(self, owner_id: str) -> List[CustomerRecord]:
        return [
            record for record in self._customers.values()
            if record.owner_id == owner_id
        ]

    def __len__(self) -> int:
        return len(self._customers)
