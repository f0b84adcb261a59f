from fastapi import APIRouter, Depends

from app.deps import get_store
from app.services import dashboard
from app.store.client import Store

router = APIRouter()


@router.get("/overview")
async def overview(store: Store = Depends(get_store)):
    return await dashboard.overview(store)


@router.get("/working")
async def working(store: Store = Depends(get_store)):
    """Workers currently processing a job, longest-running first."""
    return await dashboard.working(store)
