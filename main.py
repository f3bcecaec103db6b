import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import init_db
from exceptions import LoanIntakeError, ValidationError
from api.calculator import router as calculator_router
from api.loans import router as loans_router
from api.uploads import router as uploads_router
from services.uploads import URL_PREFIX, ensure_upload_dir

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_upload_dir(settings.upload_dir)
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan application intake, document upload and payment calculator API",
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


@app.exception_handler(LoanIntakeError)
async def intake_error_handler(request: Request, exc: LoanIntakeError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError.from_errors(exc.errors())
    return JSONResponse(status_code=400, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(loans_router)
app.include_router(uploads_router)
app.include_router(calculator_router)

# Directory is created in lifespan, so skip the mount-time existence check
app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.get("/health")
async def health():
    return {"status": "ok"}
