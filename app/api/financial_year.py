from fastapi import APIRouter, Depends
from typing import List
from app.models.models import ActionResponse, FinancialYearSummary
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import financial_year as service

router = APIRouter()


@router.get("/current", response_model=ActionResponse[int])
async def get_current_financial_year():
    """Starting year of the April-March financial year we are in"""
    logger.info("GET /api/financial-year/current")
    return {"success": True, "data": service.get_current_financial_year()}


@router.get("/available", response_model=ActionResponse[List[int]])
async def get_available_financial_years(store: Store = Depends(get_store)):
    logger.info("GET /api/financial-year/available")
    return {"success": True, "data": service.get_available_financial_years(store)}


@router.get("/{financial_year}/summary", response_model=ActionResponse[FinancialYearSummary])
async def get_financial_year_summary(financial_year: int, store: Store = Depends(get_store)):
    logger.info("GET /api/financial-year/%s/summary", financial_year)
    return {"success": True, "data": service.get_financial_year_summary(store, financial_year)}
