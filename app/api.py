"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.presenter import DashboardPresenter, build_default_presenter
from app.schemas import DashboardView
from services.dashboard import DashboardService, build_default_service

router = APIRouter()


def get_service() -> DashboardService:
    return build_default_service()


def get_presenter() -> DashboardPresenter:
    return build_default_presenter()


@router.get(
    "/dashboard",
    response_model=DashboardView,
    summary="Latest gauges, trends and statistics.",
)
async def get_dashboard(
    service: DashboardService = Depends(get_service),
    presenter: DashboardPresenter = Depends(get_presenter),
) -> DashboardView:
    return presenter.render_view(service.snapshot)


@router.post(
    "/dashboard/refresh",
    response_model=DashboardView,
    summary="Reload the dashboard now, retrying API initialization if it failed.",
)
async def refresh_dashboard(
    service: DashboardService = Depends(get_service),
    presenter: DashboardPresenter = Depends(get_presenter),
) -> DashboardView:
    snapshot = await service.load()
    return presenter.render_view(snapshot)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard and /health for service status."}
