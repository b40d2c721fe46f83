from fastapi import APIRouter, Depends, Query
from typing import List
from app.models.models import (
    ActionResponse,
    CategoryTotal,
    DeletedRecord,
    Expenditure,
    ExpenditureCreate,
    ExpenditureMonth,
    ExpenditureUpdate,
    MonthlyTotal,
)
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import expenditures as service

router = APIRouter()


@router.get("/", response_model=ActionResponse[List[Expenditure]])
async def get_all_expenditures(store: Store = Depends(get_store)):
    """Get every expenditure, newest first"""
    logger.info("GET /api/expenditures")
    return {"success": True, "data": service.get_all_expenditures(store)}


@router.get("/month", response_model=ActionResponse[ExpenditureMonth])
async def get_expenditures_by_month(year: int = Query(...), month: int = Query(...), store: Store = Depends(get_store)):
    logger.info("GET /api/expenditures/month | year=%s month=%s", year, month)
    return {"success": True, "data": service.get_expenditures_by_month(store, year, month)}


@router.get("/monthly-total", response_model=ActionResponse[MonthlyTotal])
async def get_monthly_total(year: int = Query(...), month: int = Query(...), store: Store = Depends(get_store)):
    logger.info("GET /api/expenditures/monthly-total | year=%s month=%s", year, month)
    return {"success": True, "data": service.get_monthly_total(store, year, month)}


@router.get("/categories", response_model=ActionResponse[List[CategoryTotal]])
async def get_expenditures_by_category(year: int = Query(...), month: int = Query(...), store: Store = Depends(get_store)):
    logger.info("GET /api/expenditures/categories | year=%s month=%s", year, month)
    return {"success": True, "data": service.get_expenditures_by_category(store, year, month)}


@router.get("/years", response_model=ActionResponse[List[int]])
async def get_available_years(store: Store = Depends(get_store)):
    logger.info("GET /api/expenditures/years")
    return {"success": True, "data": service.get_available_years(store)}


@router.get("/{expenditure_id}", response_model=ActionResponse[Expenditure])
async def get_expenditure(expenditure_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/expenditures/%s", expenditure_id)
    return {"success": True, "data": service.get_expenditure(store, expenditure_id)}


@router.post("/", response_model=ActionResponse[Expenditure])
async def create_expenditure(expenditure: ExpenditureCreate, store: Store = Depends(get_store)):
    logger.info("POST /api/expenditures | category=%s amount=%s", expenditure.category, expenditure.amount)
    return {"success": True, "data": service.create_expenditure(store, expenditure)}


@router.put("/{expenditure_id}", response_model=ActionResponse[Expenditure])
async def update_expenditure(expenditure_id: int, expenditure: ExpenditureUpdate, store: Store = Depends(get_store)):
    logger.info(
        "PUT /api/expenditures/%s | fields=%s",
        expenditure_id,
        sorted(expenditure.model_dump(exclude_unset=True)),
    )
    return {"success": True, "data": service.update_expenditure(store, expenditure_id, expenditure)}


@router.delete("/{expenditure_id}", response_model=ActionResponse[DeletedRecord])
async def delete_expenditure(expenditure_id: int, store: Store = Depends(get_store)):
    logger.info("DELETE /api/expenditures/%s", expenditure_id)
    return {"success": True, "data": service.delete_expenditure(store, expenditure_id)}
