"""Domain entity: a customer company that owns projects."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from carbonflow.domain.entities.patch import EntityPatch


class CustomerStatus(str, Enum):
    """Lifecycle status of a customer."""

    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass
class ContactInfo:
    email: str = ""
    phone: str = ""
    address: str = ""


@dataclass
class Customer:
    """Core domain entity for a customer.

    ``project_count`` mirrors the number of live projects referencing this
    customer. It only moves through the repository's atomic counter
    operations, never through ``CustomerPatch``.
    """

    company_name: str
    industry: str
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    status: CustomerStatus = CustomerStatus.ACTIVE
    project_count: int = 0
    id: str = field(default_factory=lambda: str(uuid4()))
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CustomerPatch(EntityPatch):
    """Partial update for a customer: ``None`` fields are left unchanged."""

    company_name: str | None = None
    contact_info: ContactInfo | None = None
    industry: str | None = None
    status: CustomerStatus | None = None
