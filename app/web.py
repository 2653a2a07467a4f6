from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app.presenter import DashboardPresenter, build_default_presenter
from services.dashboard import DashboardService, build_default_service


def get_service() -> DashboardService:
    return build_default_service()


def get_presenter() -> DashboardPresenter:
    return build_default_presenter()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    service: DashboardService = Depends(get_service),
    presenter: DashboardPresenter = Depends(get_presenter),
) -> HTMLResponse:
    return HTMLResponse(presenter.render_html(service.snapshot))
