"""ORM Models - SQLAlchemy declarative models for registry persistence.

Invariants:
    - All models inherit from Base (db/base.py)
    - Parcel is the aggregate root; sales are scoped by plot_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from land_registry.models.parcel import Parcel  # noqa: F401
from land_registry.models.sale_transaction import SaleTransactionRecord  # noqa: F401
from land_registry.models.registrar import Registrar  # noqa: F401
from land_registry.models.registry_event import RegistryEventRecord  # noqa: F401
