from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from exceptions import LendingError, NotFoundError, PersistenceError, ValidationError
from log_config import get_logger, setup_logging
from api.customers import router as customers_router
from api.loans import router as loans_router

setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s ready (database: %s)", settings.app_name, settings.database_url.split("://")[0])
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan lending, repayment and ledger API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(loans_router)
app.include_router(customers_router)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (PersistenceError, 500),
)


@app.exception_handler(LendingError)
async def lending_error_handler(request: Request, exc: LendingError):
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = sorted(
        {".".join(str(p) for p in e["loc"] if p != "body") or "body" for e in exc.errors()}
    )
    return JSONResponse(
        status_code=400,
        content={"detail": f"Missing or invalid parameters: {', '.join(fields)}"},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}
