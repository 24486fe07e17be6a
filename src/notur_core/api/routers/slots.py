"""Slot catalog router."""

from fastapi import APIRouter

from notur_core.api.models import SlotDefinitionModel, SlotListResponse
from notur_core.bridge.slots import SLOT_DEFINITIONS

slot_router = APIRouter(prefix="/slots", tags=["Slots"])


@slot_router.get("", response_model=SlotListResponse)
async def list_slots() -> SlotListResponse:
    """List every slot id the host renders."""
    slots = [
        SlotDefinitionModel(id=d.id, type=d.type.value, description=d.description)
        for d in SLOT_DEFINITIONS
    ]
    return SlotListResponse(slots=slots, total=len(slots))
