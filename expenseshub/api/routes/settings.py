from typing import Any

from fastapi import APIRouter, Body, Depends

from expenseshub.api.dependencies import get_settings_flow
from expenseshub.models import UserSettings
from expenseshub.orchestrator import SettingsFlow

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=UserSettings)
async def get_settings(flow: SettingsFlow = Depends(get_settings_flow)):
    """The settings singleton; created with defaults on first access."""
    return await flow.get_settings()


@router.patch("", response_model=UserSettings)
async def update_settings(
    payload: Any = Body(default=None),
    flow: SettingsFlow = Depends(get_settings_flow),
):
    return await flow.update_settings(payload)
