from fastapi import APIRouter, Query
from typing import List, Optional

from app.schemas.closed_date import ClosedDateResponse
from app.services.closed_date_service import get_public_closed_dates

router = APIRouter()

@router.get("/salon/closed-dates", response_model=List[ClosedDateResponse])
async def public_closed_dates(
    salonId: Optional[str] = Query(None, description="Salon to read; defaults to the latest salon")
):
    """Closed dates shown on the public booking page"""
    return await get_public_closed_dates(salonId)
