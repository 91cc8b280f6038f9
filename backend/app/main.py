# Tutoring-center billing backend entrypoint.

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api import classes
from backend.app.api import contracts
from backend.app.api import dashboard
from backend.app.api import discounts
from backend.app.api import settlements
from backend.app.api import students
from backend.app.core.errors import BillingError, ConflictError, DataError, NotFoundError, ValidationError
from backend.app.core.logging import configure_logging, get_logger
from backend.app.core.settings import get_settings

settings = get_settings()
configure_logging(level=settings.log_level)
logger = get_logger("api")

app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(classes.router)
app.include_router(students.router)
app.include_router(discounts.router)
app.include_router(contracts.router)
app.include_router(settlements.router)
app.include_router(dashboard.router)

_ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (DataError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    status_code = next(
        (code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    logger.warning(
        "request_failed",
        extra={"path": request.url.path, "code": exc.code, "status_code": status_code, "detail": exc.message},
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


@app.get("/")
def read_root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
