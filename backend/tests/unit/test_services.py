"""Unit tests for the application services using in-memory fake repositories."""

from dataclasses import replace
from datetime import date

import pytest

from carbonflow.application.interfaces import (
    CustomerRepository,
    MeasurementRepository,
    ProjectRepository,
)
from carbonflow.application.schemas import (
    CustomerCreate,
    CustomerUpdate,
    MeasurementBatchCreate,
    MeasurementCreate,
    MeasurementReading,
    ProjectCreate,
    ProjectUpdate,
)
from carbonflow.application.services import (
    CustomerService,
    MeasurementService,
    ProjectService,
    completion_rate,
)
from carbonflow.domain.entities import (
    EntityStatistics,
    ListQuery,
    MeasurementType,
    Page,
    ProjectPatch,
    ProjectStatus,
    ProjectType,
)
from carbonflow.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    HasDependentsError,
    InvalidEntityError,
    InvalidStateError,
)


class _InMemoryRepository:
    """Dict-backed implementation of the shared repository operations."""

    dependent_attr: str | None = None

    def __init__(self):
        self.items: dict = {}
        self.adjustments: list[int] = []

    async def list(self, query: ListQuery) -> Page:
        return Page(items=list(self.items.values())[: query.page_size])

    async def get_by_id(self, entity_id):
        return self.items.get(entity_id)

    async def create(self, entity):
        self.items[entity.id] = entity
        return entity

    async def update(self, entity_id, patch, *, expected_version=None):
        if entity_id not in self.items:
            return None
        updated = patch.apply(self.items[entity_id])
        updated.version += 1
        self.items[entity_id] = updated
        return updated

    async def delete(self, entity_id):
        entity = self.items.get(entity_id)
        if entity is None:
            return False
        count = getattr(entity, self.dependent_attr) if self.dependent_attr else 0
        if count > 0:
            raise HasDependentsError(type(entity).__name__, entity_id, count)
        del self.items[entity_id]
        return True

    async def increment_dependent_count(self, entity_id):
        return await self.adjust_dependent_count(entity_id, 1)

    async def decrement_dependent_count(self, entity_id):
        return await self.adjust_dependent_count(entity_id, -1)

    async def adjust_dependent_count(self, entity_id, delta):
        entity = self.items.get(entity_id)
        if entity is None:
            return None
        count = getattr(entity, self.dependent_attr) + delta
        if count < 0:
            raise InvalidStateError(type(entity).__name__, entity_id, "underflow")
        self.adjustments.append(delta)
        self.items[entity_id] = replace(entity, **{self.dependent_attr: count})
        return self.items[entity_id]

    async def statistics(self) -> EntityStatistics:
        by_status: dict[str, int] = {}
        for entity in self.items.values():
            key = getattr(entity, "status").value
            by_status[key] = by_status.get(key, 0) + 1
        return EntityStatistics(total_by_status=by_status)


class FakeCustomerRepository(_InMemoryRepository, CustomerRepository):
    dependent_attr = "project_count"

    async def find_by_company_name(self, company_name):
        return next(
            (c for c in self.items.values() if c.company_name == company_name), None
        )

    async def find_by_industry(self, industry, limit=20):
        return [c for c in self.items.values() if c.industry == industry][:limit]


class FakeProjectRepository(_InMemoryRepository, ProjectRepository):
    dependent_attr = "measurement_count"

    async def find_by_customer(self, customer_id, limit=20):
        return [p for p in self.items.values() if p.customer_id == customer_id][:limit]

    async def find_by_status(self, status, limit=20):
        return [p for p in self.items.values() if p.status == status][:limit]

    async def update_progress(self, project_id, co2_actual, budget_used=None):
        return await self.update(
            project_id, ProjectPatch(co2_actual=co2_actual, budget_used=budget_used)
        )


class FakeMeasurementRepository(_InMemoryRepository, MeasurementRepository):
    async def find_by_type(self, measurement_type, limit=50):
        return [m for m in self.items.values() if m.measurement_type == measurement_type][:limit]


@pytest.fixture
def customer_repo() -> FakeCustomerRepository:
    return FakeCustomerRepository()


@pytest.fixture
def project_repo() -> FakeProjectRepository:
    return FakeProjectRepository()


@pytest.fixture
def measurement_repo() -> FakeMeasurementRepository:
    return FakeMeasurementRepository()


@pytest.fixture
def customer_service(customer_repo) -> CustomerService:
    return CustomerService(customer_repo)


@pytest.fixture
def project_service(project_repo, customer_repo) -> ProjectService:
    return ProjectService(project_repo, customer_repo)


@pytest.fixture
def measurement_service(measurement_repo, project_repo) -> MeasurementService:
    return MeasurementService(measurement_repo, project_repo, batch_size=25)


def _project_data(customer_id: str, name: str = "Plant 3") -> ProjectCreate:
    return ProjectCreate(
        project_name=name,
        customer_id=customer_id,
        project_type=ProjectType.CO2_REMOVAL,
        start_date=date(2024, 4, 1),
    )


# ── Customers ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_customer(customer_service: CustomerService):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    assert customer.id is not None
    assert customer.project_count == 0


@pytest.mark.asyncio
async def test_duplicate_active_company_name_is_rejected(customer_service: CustomerService):
    await customer_service.create_customer(CustomerCreate(company_name="Acme", industry="food"))

    with pytest.raises(DuplicateEntityError):
        await customer_service.create_customer(
            CustomerCreate(company_name="Acme", industry="chemicals")
        )


@pytest.mark.asyncio
async def test_get_customer_not_found(customer_service: CustomerService):
    with pytest.raises(EntityNotFoundError):
        await customer_service.get_customer("missing")


@pytest.mark.asyncio
async def test_empty_update_returns_current_customer(customer_service: CustomerService):
    created = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )

    same = await customer_service.update_customer(created.id, CustomerUpdate())

    assert same.version == created.version


@pytest.mark.asyncio
async def test_delete_missing_customer_raises(customer_service: CustomerService):
    with pytest.raises(EntityNotFoundError):
        await customer_service.delete_customer("missing")


# ── Projects ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_project_create_and_delete_maintain_customer_count(
    customer_service: CustomerService, project_service: ProjectService, customer_repo
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    first = await project_service.create_project(_project_data(customer.id))
    await project_service.create_project(_project_data(customer.id, "Plant 4"))

    assert (await customer_repo.get_by_id(customer.id)).project_count == 2
    with pytest.raises(HasDependentsError):
        await customer_service.delete_customer(customer.id)

    await project_service.delete_project(first.id)
    assert (await customer_repo.get_by_id(customer.id)).project_count == 1


@pytest.mark.asyncio
async def test_project_for_missing_customer_is_not_created(project_service, project_repo):
    with pytest.raises(EntityNotFoundError):
        await project_service.create_project(_project_data("missing"))
    assert project_repo.items == {}


@pytest.mark.asyncio
async def test_update_project_ignores_unset_fields(
    customer_service, project_service: ProjectService
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))

    updated = await project_service.update_project(
        project.id, ProjectUpdate(status=ProjectStatus.ACTIVE)
    )

    assert updated.status == ProjectStatus.ACTIVE
    assert updated.project_name == "Plant 3"


def test_completion_rate():
    assert completion_rate(EntityStatistics()) == 0.0
    stats = EntityStatistics(total_by_status={"completed": 1, "active": 3})
    assert completion_rate(stats) == 25.0


# ── Measurements ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_record_measurement_increments_project(
    customer_service, project_service, measurement_service: MeasurementService, project_repo
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))

    measurement = await measurement_service.record_measurement(
        MeasurementCreate(
            project_id=project.id,
            measurement_type=MeasurementType.WATER_QUALITY,
            values={"ph": 9.0},
        )
    )

    assert measurement.alert_level.value == "high"
    assert (await project_repo.get_by_id(project.id)).measurement_count == 1


@pytest.mark.asyncio
async def test_batch_adjusts_parent_once_per_chunk(
    customer_service, project_service, measurement_service: MeasurementService, project_repo
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))
    readings = [
        MeasurementReading(measurement_type=MeasurementType.SOIL, values={"ph": 6.5})
        for _ in range(60)
    ]

    created = await measurement_service.record_batch(
        MeasurementBatchCreate(project_id=project.id, measurements=readings)
    )

    assert len(created) == 60
    assert project_repo.adjustments == [25, 25, 10]
    assert (await project_repo.get_by_id(project.id)).measurement_count == 60


@pytest.mark.asyncio
async def test_record_for_missing_project_raises(measurement_service: MeasurementService):
    with pytest.raises(EntityNotFoundError):
        await measurement_service.record_measurement(
            MeasurementCreate(
                project_id="missing",
                measurement_type=MeasurementType.SOIL,
                values={"ph": 7.0},
            )
        )


@pytest.mark.asyncio
async def test_delete_measurement_decrements_project(
    customer_service, project_service, measurement_service: MeasurementService, project_repo
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))
    measurement = await measurement_service.record_measurement(
        MeasurementCreate(
            project_id=project.id,
            measurement_type=MeasurementType.SOIL,
            values={"ph": 7.0},
        )
    )

    await measurement_service.delete_measurement(measurement.id)

    assert (await project_repo.get_by_id(project.id)).measurement_count == 0


@pytest.mark.asyncio
async def test_list_measurements_returns_page_summary(
    customer_service, project_service, measurement_service: MeasurementService
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))
    for ph in (7.0, 9.5):
        await measurement_service.record_measurement(
            MeasurementCreate(
                project_id=project.id,
                measurement_type=MeasurementType.WATER_QUALITY,
                values={"ph": ph},
            )
        )

    page, summary = await measurement_service.list_measurements(project_id=project.id)

    assert page.count == 2
    assert summary.alert_count == 1


# ── Update validation ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_rename_to_another_customers_name_is_rejected(customer_service: CustomerService):
    await customer_service.create_customer(CustomerCreate(company_name="Acme", industry="food"))
    beta = await customer_service.create_customer(
        CustomerCreate(company_name="Beta", industry="food")
    )

    with pytest.raises(DuplicateEntityError):
        await customer_service.update_customer(beta.id, CustomerUpdate(company_name="Acme"))


@pytest.mark.asyncio
async def test_rename_to_own_name_is_allowed(customer_service: CustomerService):
    acme = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )

    updated = await customer_service.update_customer(
        acme.id, CustomerUpdate(company_name="Acme", industry="chemicals")
    )

    assert updated.industry == "chemicals"


@pytest.mark.asyncio
async def test_list_limit_is_capped(customer_repo):
    service = CustomerService(customer_repo, max_page_size=5)
    for i in range(7):
        await service.create_customer(CustomerCreate(company_name=f"Company {i}", industry="food"))

    page = await service.list_customers(limit=50)

    assert page.count == 5


@pytest.mark.asyncio
async def test_end_date_before_start_date_is_rejected_on_update(
    customer_service, project_service: ProjectService, project_repo
):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))

    with pytest.raises(InvalidEntityError):
        await project_service.update_project(
            project.id, ProjectUpdate(end_date=date(2024, 1, 1))
        )
    assert (await project_repo.get_by_id(project.id)).end_date is None


@pytest.mark.asyncio
async def test_explicit_null_clears_end_date(customer_service, project_service: ProjectService):
    customer = await customer_service.create_customer(
        CustomerCreate(company_name="Acme", industry="food")
    )
    project = await project_service.create_project(_project_data(customer.id))
    await project_service.update_project(project.id, ProjectUpdate(end_date=date(2024, 12, 31)))

    kept = await project_service.update_project(project.id, ProjectUpdate(description="phase 2"))
    assert kept.end_date == date(2024, 12, 31)

    cleared = await project_service.update_project(project.id, ProjectUpdate(end_date=None))
    assert cleared.end_date is None
