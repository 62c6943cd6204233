import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from dukan.core.config import settings
from dukan.core.database import SessionLocal, init_db
from dukan.core.deps import get_current_user
from dukan.core.errors import AppError, app_error_handler, validation_error_handler
from dukan.routes.auth import router as auth_router
from dukan.routes.closings import router as closings_router
from dukan.routes.customers import router as customers_router
from dukan.routes.expenses import router as expenses_router
from dukan.routes.health import router as health_router
from dukan.routes.licenses import router as licenses_router
from dukan.routes.products import router as products_router
from dukan.routes.purchases import router as purchases_router
from dukan.routes.reports import router as reports_router
from dukan.routes.sales import router as sales_router
from dukan.routes.shop import router as shop_router
from dukan.routes.staff import router as staff_router
from dukan.services.seed import seed_demo


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.seed_demo:
        with SessionLocal() as db:
            seed_demo(db)
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Dukan POS API", version="0.1.0", lifespan=lifespan)

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Every tenant-scoped router requires a valid token
    tenant = [Depends(get_current_user)]

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router, tags=["auth"])
    app.include_router(licenses_router, prefix="/licenses", tags=["licenses"])
    app.include_router(shop_router, prefix="/shop", tags=["shop"], dependencies=tenant)
    app.include_router(staff_router, prefix="/staff", tags=["staff"], dependencies=tenant)
    app.include_router(products_router, prefix="/products", tags=["products"], dependencies=tenant)
    app.include_router(customers_router, prefix="/customers", tags=["customers"], dependencies=tenant)
    app.include_router(sales_router, prefix="/sales", tags=["sales"], dependencies=tenant)
    app.include_router(purchases_router, prefix="/purchases", tags=["purchases"], dependencies=tenant)
    app.include_router(expenses_router, prefix="/expenses", tags=["expenses"], dependencies=tenant)
    app.include_router(closings_router, prefix="/closings", tags=["closings"], dependencies=tenant)
    app.include_router(reports_router, prefix="/reports", tags=["reports"], dependencies=tenant)

    return app


app = create_app()
