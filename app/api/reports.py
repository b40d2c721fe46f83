from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Optional
from app.models.models import ActionResponse, DailyReport, FinancialYearReport, MonthlyReport, YearlyReport
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import reports as service
from app.services.financial_year import get_current_financial_year

router = APIRouter()


@router.get("/daily", response_model=ActionResponse[DailyReport])
async def get_daily_report(day: Optional[date] = None, store: Store = Depends(get_store)):
    """Figures for one day (today when not given)"""
    day = day or date.today()
    logger.info("GET /api/reports/daily | day=%s", day)
    return {"success": True, "data": service.get_daily_report(store, day)}


@router.get("/monthly", response_model=ActionResponse[MonthlyReport])
async def get_monthly_report(year: int = Query(...), month: int = Query(...), store: Store = Depends(get_store)):
    logger.info("GET /api/reports/monthly | year=%s month=%s", year, month)
    return {"success": True, "data": service.get_monthly_report(store, year, month)}


@router.get("/yearly", response_model=ActionResponse[YearlyReport])
async def get_yearly_report(year: int = Query(...), store: Store = Depends(get_store)):
    logger.info("GET /api/reports/yearly | year=%s", year)
    return {"success": True, "data": service.get_yearly_report(store, year)}


@router.get("/financial-year", response_model=ActionResponse[FinancialYearReport])
async def get_financial_year_report(financial_year: Optional[int] = None, store: Store = Depends(get_store)):
    """April to March report (current financial year when not given)"""
    if financial_year is None:
        financial_year = get_current_financial_year()
    logger.info("GET /api/reports/financial-year | fy=%s", financial_year)
    return {"success": True, "data": service.get_financial_year_report(store, financial_year)}
