from fastapi import APIRouter
from app.api.api_v1.endpoints import auth, closed_dates, public

router = APIRouter()

# Include all routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(closed_dates.router, prefix="/salons", tags=["Closed Dates"])
router.include_router(public.router, prefix="/public", tags=["Public"])
