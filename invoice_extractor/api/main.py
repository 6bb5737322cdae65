from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from ..core.errors import InvoiceServiceError
from .routers import extract, health, invoices, upload

logger = setup_logging()
app = FastAPI(title="PDF Invoice Extractor")


# Add custom exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    logger.error(f"Request body: {await request.body()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(), "body": str(await request.body())},
    )


# Pipeline errors carry their own status code and machine-readable error code
@app.exception_handler(InvoiceServiceError)
async def invoice_service_exception_handler(request: Request, exc: InvoiceServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error_code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.error_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Configure CORS to allow frontend access
# CORS_ORIGINS can be set in .env as comma-separated list
# Example: CORS_ORIGINS=http://localhost:3000,https://your-frontend.com
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(upload.router)
app.include_router(extract.router)
app.include_router(invoices.router)
