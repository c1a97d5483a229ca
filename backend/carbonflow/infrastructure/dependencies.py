"""FastAPI dependency injection: wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carbonflow.config import Settings
from carbonflow.application.services import (
    CustomerService,
    MeasurementService,
    ProjectService,
)
from carbonflow.infrastructure.database.item_store import ItemStore
from carbonflow.infrastructure.database.session import get_db_session
from carbonflow.infrastructure.database.repositories import (
    SQLAlchemyCustomerRepository,
    SQLAlchemyMeasurementRepository,
    SQLAlchemyProjectRepository,
)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


async def get_item_store(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ItemStore, None]:
    """Provides the item store bound to the request's unit of work."""
    yield ItemStore(session)


async def get_customer_service(
    store: ItemStore = Depends(get_item_store),
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[CustomerService, None]:
    """Provides a CustomerService instance with its repository wired up."""
    yield CustomerService(
        SQLAlchemyCustomerRepository(store),
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


async def get_project_service(
    store: ItemStore = Depends(get_item_store),
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[ProjectService, None]:
    """Provides a ProjectService with the project and customer repositories sharing one session."""
    yield ProjectService(
        SQLAlchemyProjectRepository(store),
        SQLAlchemyCustomerRepository(store),
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


async def get_measurement_service(
    store: ItemStore = Depends(get_item_store),
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[MeasurementService, None]:
    """Provides a MeasurementService with the measurement and project repositories wired up."""
    yield MeasurementService(
        SQLAlchemyMeasurementRepository(store),
        SQLAlchemyProjectRepository(store),
        default_page_size=settings.measurement_page_size,
        max_page_size=settings.max_page_size,
    )
