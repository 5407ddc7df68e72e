"""SQLAlchemy models package.

All ORM classes are registered on import so mapper configuration (relationship
string resolution) never depends on import order.
"""

from crm.models import (  # noqa: F401
    account,
    client,
    staff_identity,
    transaction,
)
