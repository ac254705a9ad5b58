from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..auth_utils import require_admin
from ..schemas import ConfigResponse, ConfigUpdateRequest, OkResponse
from ..state import Hub, get_hub

router = APIRouter(prefix="/api", tags=["config"])


def _config_response(hub: Hub) -> ConfigResponse:
    return ConfigResponse(config=hub.config.config_view(), collections=hub.config.collections())


@router.get("/config", response_model=ConfigResponse)
async def get_config(hub: Hub = Depends(get_hub)):
    return _config_response(hub)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.post("/admin/login", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def admin_login():
    return OkResponse()


@router.get("/admin/config", response_model=ConfigResponse, dependencies=[Depends(require_admin)])
async def get_admin_config(hub: Hub = Depends(get_hub)):
    return _config_response(hub)


@router.put("/admin/config", response_model=ConfigResponse, dependencies=[Depends(require_admin)])
async def update_config(
    req: ConfigUpdateRequest = Body(default=ConfigUpdateRequest()),
    hub: Hub = Depends(get_hub),
):
    # Only the sections actually sent take part in the merge.
    hub.config.update(req.model_dump(exclude_unset=True))
    return _config_response(hub)
