from fastapi import APIRouter, Depends
from typing import List
from app.models.models import ActionResponse, DashboardStats, RecentActivity
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import dashboard as service

router = APIRouter()


@router.get("/stats", response_model=ActionResponse[DashboardStats])
async def get_dashboard_stats(store: Store = Depends(get_store)):
    """Get dashboard statistics"""
    logger.info("GET /api/dashboard/stats")
    return {"success": True, "data": service.get_dashboard_stats(store)}


@router.get("/recent-activity", response_model=ActionResponse[List[RecentActivity]])
async def get_recent_activity(store: Store = Depends(get_store)):
    """Latest sales, expenses and low-stock alerts"""
    logger.info("GET /api/dashboard/recent-activity")
    return {"success": True, "data": service.get_recent_activities(store)}
