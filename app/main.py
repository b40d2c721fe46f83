from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import dashboard, expenditures, financial_year, payments, products, purchases, reports, sales
from app.core.config import settings
from app.core.database import close_pg_pool, init_schema
from app.core.logging import logger
from app.core.exceptions import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        init_schema()
    yield
    close_pg_pool()


app = FastAPI(
    title=settings.project_name,
    description="API for managing furniture shop stock, sales, supplier bills and expenses",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(purchases.router, prefix="/api/purchases", tags=["purchases"])
app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
app.include_router(sales.router, prefix="/api/sales", tags=["sales"])
app.include_router(expenditures.router, prefix="/api/expenditures", tags=["expenditures"])
app.include_router(financial_year.router, prefix="/api/financial-year", tags=["financial-year"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

@app.get("/")
async def root():
    logger.info("Root endpoint hit")
    return {"message": settings.project_name}

@app.get("/health")
async def health_check():
    logger.info("Health check requested")
    return {"status": "healthy"}
