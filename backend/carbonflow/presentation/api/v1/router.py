"""V1 API router: aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from carbonflow.presentation.api.v1.endpoints.health import router as health_router
from carbonflow.presentation.api.v1.endpoints.customers import router as customers_router
from carbonflow.presentation.api.v1.endpoints.projects import router as projects_router
from carbonflow.presentation.api.v1.endpoints.measurements import router as measurements_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(customers_router)
router.include_router(projects_router)
router.include_router(measurements_router)
