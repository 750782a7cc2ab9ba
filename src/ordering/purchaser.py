"""The authenticated purchaser, as handed to us by the auth collaborator."""

from dataclasses import dataclass

ADMIN = "admin"
CUSTOMER = "customer"
ROLES = (CUSTOMER, ADMIN)


@dataclass(frozen=True)
class Purchaser:
    id: str
    role: str = CUSTOMER

    def __post_init__(self):
        if not self.id:
            raise ValueError("Purchaser id is required")
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role}")

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def can_view(self, order) -> bool:
        return self.is_admin or str(order.customer_id) == str(self.id)
