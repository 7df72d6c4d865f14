from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any

from app.core.auth import get_current_owner
from app.schemas.closed_date import ClosedDateCreate, ClosedDateResponse
from app.services.closed_date_service import (
    ClosedDateConflictError,
    ClosedDateNotFoundError,
    SalonAccessDeniedError,
    SalonNotFoundError,
    add_closed_date,
    get_salon_closed_dates,
    remove_closed_date,
)

router = APIRouter()

def _salon_error(error: Exception) -> HTTPException:
    if isinstance(error, SalonNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salon not found"
        )
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied"
    )

@router.get("/{salon_id}/closed-dates", response_model=List[ClosedDateResponse])
async def list_closed_dates(salon_id: str):
    """
    Get a salon's closed dates, salon-wide and per stylist
    """
    return await get_salon_closed_dates(salon_id)

@router.post("/{salon_id}/closed-dates", response_model=ClosedDateResponse)
async def create_closed_date(
    salon_id: str,
    closed_date_in: ClosedDateCreate,
    current_user: Dict[str, Any] = Depends(get_current_owner)
):
    """
    Close the salon, or a single stylist, on a date
    """
    try:
        return await add_closed_date(salon_id, closed_date_in, current_user)
    except (SalonNotFoundError, SalonAccessDeniedError) as error:
        raise _salon_error(error)
    except ClosedDateConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This closed date already exists"
        )

@router.delete("/{salon_id}/closed-dates/{date_id}", response_model=Dict[str, Any])
async def delete_closed_date(
    salon_id: str,
    date_id: str,
    current_user: Dict[str, Any] = Depends(get_current_owner)
):
    """
    Remove one of the salon's closed dates
    """
    try:
        await remove_closed_date(salon_id, date_id, current_user)
    except (SalonNotFoundError, SalonAccessDeniedError) as error:
        raise _salon_error(error)
    except ClosedDateNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Closed date not found"
        )
    return {"success": True}
