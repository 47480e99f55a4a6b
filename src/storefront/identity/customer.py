"""Customer aggregate (CQRS) — the identity collaborator the storefront core reads.

Registration and authentication live outside this core. The storefront only
needs to know whether a customer exists and is active before it lets them
touch a cart or place an order.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, String

from storefront.domain import storefront


@storefront.aggregate
class Customer:
    email = String(required=True, max_length=254)
    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, email, first_name, last_name):
        now = datetime.now(UTC)
        return cls(
            email=email,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Customer is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)


class CustomerDirectory:
    """Read access to customers for the cart and checkout."""

    def __init__(self, domain):
        self.domain = domain

    def register(self, email, first_name, last_name) -> Customer:
        customer = Customer.register(email=email, first_name=first_name, last_name=last_name)
        self.domain.repository_for(Customer).add(customer)
        return customer

    def get_active(self, customer_id) -> Customer | None:
        """Return the customer if it exists and is active, otherwise None."""
        try:
            customer = self.domain.repository_for(Customer).get(str(customer_id))
        except ObjectNotFoundError:
            return None
        return customer if customer.is_active else None
