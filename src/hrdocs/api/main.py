"""
Main FastAPI application for the HRDocs analysis service.
Exposes document field extraction and quality analysis over HTTP.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
import logging
import time
import uuid

from fastapi import FastAPI, HTTPException, Depends, Request, UploadFile, File, Form, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic_settings import BaseSettings

from ..core.interfaces import DocumentAnalysisService, DocumentStore, IdentityVerifier
from ..core.monitoring import setup_logging
from ..core.resilience import AnalysisError, AuthenticationError, InputValidationError
from ..services.orchestration import DocumentAnalysisOrchestrator
from ..services.storage import (
    InMemoryDocumentStore,
    StaticTokenVerifier,
    SupabaseDocumentStore,
    SupabaseIdentityVerifier
)


class Settings(BaseSettings):
    """Application settings."""
    app_name: str = "HRDocs Analysis Service"
    version: str = "0.1.0"
    debug: bool = False
    allowed_hosts: list = ["*"]
    cors_origins: list = ["*"]

    # Logging
    log_level: str = "INFO"
    structured_logging: bool = True

    # Supabase project backing authentication and the record tables
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    documents_table: str = "documents"
    contracts_table: str = "employee_contracts"
    request_timeout_seconds: float = 10.0

    # Accepted bearer tokens when no Supabase project is configured
    api_tokens: list = []

    # Upload and text limits
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    text_preview_length: int = 5000
    stored_text_length: int = 10000

    class Config:
        env_file = ".env"


class HealthCheckResponse(BaseModel):
    """Response model for health checks."""
    status: str
    service: str
    version: str
    timestamp: float
    services: Optional[Dict[str, str]] = None


# Global settings instance
settings = Settings()

setup_logging(
    log_level="DEBUG" if settings.debug else settings.log_level,
    structured=settings.structured_logging
)
logger = logging.getLogger(__name__)

# Global service instances
analysis_service: Optional[DocumentAnalysisService] = None
identity_verifier: Optional[IdentityVerifier] = None

# Authentication
security = HTTPBearer(auto_error=False)


def build_identity_verifier() -> IdentityVerifier:
    if settings.supabase_url:
        return SupabaseIdentityVerifier(
            url=settings.supabase_url,
            api_key=settings.supabase_service_role_key,
            timeout=settings.request_timeout_seconds
        )
    logger.warning("No Supabase URL configured, accepting static API tokens only")
    return StaticTokenVerifier(settings.api_tokens)


def build_document_store(table: str) -> DocumentStore:
    if settings.supabase_url:
        return SupabaseDocumentStore(
            url=settings.supabase_url,
            api_key=settings.supabase_service_role_key,
            table=table,
            timeout=settings.request_timeout_seconds
        )
    logger.warning(f"No Supabase URL configured, {table} updates are kept in memory")
    return InMemoryDocumentStore()


async def initialize_services():
    """Initialize all services."""
    global analysis_service, identity_verifier

    try:
        logger.info("Initializing services...")

        identity_verifier = build_identity_verifier()
        analysis_service = DocumentAnalysisOrchestrator(
            document_store=build_document_store(settings.documents_table),
            text_preview_length=settings.text_preview_length,
            stored_text_length=settings.stored_text_length,
            contract_store=build_document_store(settings.contracts_table)
        )

        logger.info("All services initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize services: {str(e)}")
        raise


async def cleanup_services():
    """Cleanup services on shutdown."""
    global analysis_service, identity_verifier

    logger.info("Cleaning up services...")

    analysis_service = None
    identity_verifier = None

    logger.info("Services cleaned up")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting HRDocs Analysis Service")

    await initialize_services()

    yield

    logger.info("Shutting down HRDocs Analysis Service")

    await cleanup_services()


def get_analysis_service() -> DocumentAnalysisService:
    if not analysis_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis service not available"
        )
    return analysis_service


def get_identity_verifier() -> IdentityVerifier:
    if not identity_verifier:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity verification not available"
        )
    return identity_verifier


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier)
) -> str:
    """Resolve the bearer credential to a user ID or reject the request."""
    if not credentials:
        raise AuthenticationError("No authorization header")

    user_id = await verifier.verify(credentials.credentials)
    if not user_id:
        raise AuthenticationError("Unauthorized")

    return user_id


async def read_upload(file: Optional[UploadFile]) -> bytes:
    """Read an uploaded file, enforcing presence and the size limit."""
    if file is None:
        raise InputValidationError("No file provided")

    content = await file.read()
    if len(content) > settings.max_file_size:
        raise InputValidationError(f"File exceeds maximum size of {settings.max_file_size} bytes")

    return content


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": True, "data": data}


def failure_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"success": False, "error": message}
    )


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Field extraction and quality analysis for HR documents",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add a request ID header and access log line to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    response = await call_next(request)

    execution_time = (time.time() - start_time) * 1000  # Convert to milliseconds

    response.headers["X-Request-ID"] = request_id

    logger.info(
        f"Request {request_id}: {request.method} {request.url.path} "
        f"completed in {execution_time:.2f}ms with status {response.status_code}",
        extra={"request_id": request_id, "execution_time_ms": round(execution_time, 2)}
    )

    return response


# Health check endpoints
@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Basic health check endpoint."""
    return HealthCheckResponse(
        status="healthy",
        service="document-analysis",
        version=settings.version,
        timestamp=time.time()
    )


@app.get("/health/detailed", response_model=HealthCheckResponse)
async def detailed_health_check():
    """Detailed health check including service dependencies."""
    services_status = {
        "analysis_service": "healthy" if analysis_service else "not_initialized",
        "identity_verifier": "healthy" if identity_verifier else "not_initialized",
        "document_store": "supabase" if settings.supabase_url else "in_memory"
    }

    overall_status = "healthy" if analysis_service and identity_verifier else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        service="document-analysis",
        version=settings.version,
        timestamp=time.time(),
        services=services_status
    )


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to the HRDocs Analysis Service",
        "version": settings.version,
        "description": "Field extraction and quality analysis for HR documents",
        "docs": "/docs" if settings.debug else "Documentation not available in production",
        "health": "/health",
        "endpoints": {
            "analyze_document": "/api/v1/documents/analyze",
            "analyze_dates": "/api/v1/documents/analyze-dates",
            "parse_contract": "/api/v1/contracts/parse",
            "health": "/health"
        }
    }


# Main API endpoints
@app.post("/api/v1/documents/analyze")
async def analyze_document(
    file: Optional[UploadFile] = File(None, description="Document file to analyze"),
    document_id: Optional[str] = Form(None, alias="documentId"),
    document_type: Optional[str] = Form(None, alias="documentType"),
    user_id: str = Depends(get_current_user),
    service: DocumentAnalysisService = Depends(get_analysis_service)
):
    """
    Analyze an uploaded HR document.

    Approximates the document text, extracts identifiers, names, dates,
    amounts and employment attributes, scores the extraction, and updates
    the named document record when ``documentId`` is given.
    """
    content = await read_upload(file)

    try:
        logger.info(
            f"User {user_id} analyzing {file.filename or 'upload'} ({len(content)} bytes)",
            extra={"user_id": user_id, "document_id": document_id}
        )

        result = await service.analyze_document(
            file_bytes=content,
            mime_type=file.content_type or "application/octet-stream",
            document_type=document_type,
            document_id=document_id
        )

        return success_response(result.to_payload())

    except AnalysisError:
        raise
    except Exception as e:
        logger.error(f"Error analyzing document: {str(e)}", exc_info=True)
        return failure_response(str(e) or "Failed to analyze document")


@app.post("/api/v1/documents/analyze-dates")
async def analyze_document_dates(
    file: Optional[UploadFile] = File(None, description="Document file to scan for dates"),
    user_id: str = Depends(get_current_user),
    service: DocumentAnalysisService = Depends(get_analysis_service)
):
    """
    Locate start, end, expiry and issue dates in an uploaded document.

    Nothing is persisted.
    """
    content = await read_upload(file)

    try:
        result = await service.scan_document_dates(
            file_bytes=content,
            mime_type=file.content_type or "application/octet-stream"
        )

        return success_response(result.model_dump(by_alias=True))

    except AnalysisError:
        raise
    except Exception as e:
        logger.error(f"Error scanning document dates: {str(e)}", exc_info=True)
        return failure_response(str(e) or "Failed to analyze document dates")


@app.post("/api/v1/contracts/parse")
async def parse_contract(
    file: Optional[UploadFile] = File(None, description="Employment contract to parse"),
    contract_id: Optional[str] = Form(None, alias="contractId"),
    company_id: Optional[str] = Form(None, alias="companyId"),
    user_id: str = Depends(get_current_user),
    service: DocumentAnalysisService = Depends(get_analysis_service)
):
    """
    Parse contract terms from an uploaded employment contract.

    The contract record named by ``contractId`` receives the parsed terms,
    the extraction status and the fill-rate confidence.
    """
    if file is None or not contract_id:
        raise InputValidationError("Missing file or contractId")

    content = await read_upload(file)

    try:
        logger.info(
            f"User {user_id} parsing contract {contract_id} for company {company_id or '-'}",
            extra={"user_id": user_id, "document_id": contract_id}
        )

        result = await service.parse_contract(
            file_bytes=content,
            mime_type=file.content_type or "application/octet-stream",
            contract_id=contract_id
        )

        return {
            "success": True,
            "data": result.data.to_payload(),
            "confidence": result.confidence,
            "message": "Contract parsed successfully"
        }

    except AnalysisError:
        raise
    except Exception as e:
        logger.error(f"Error parsing contract: {str(e)}", exc_info=True)
        return failure_response(str(e) or "Failed to parse contract")


# Error handlers
@app.exception_handler(AnalysisError)
async def analysis_exception_handler(request: Request, exc: AnalysisError):
    """Report business failures in the response body rather than the status code."""
    logger.warning(
        f"{type(exc).__name__}: {exc.message} - {request.method} {request.url.path}",
        extra={"request_id": getattr(request.state, "request_id", None)}
    )
    return failure_response(exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed form fields in the response body rather than the status code."""
    errors = exc.errors()
    logger.warning(f"Request validation failed: {errors} - {request.method} {request.url.path}")

    if any(tuple(error.get("loc", ()))[-1:] == ("file",) for error in errors):
        return failure_response("No file provided")

    message = errors[0].get("msg", "") if errors else ""
    return failure_response(f"Invalid request: {message}" if message else "Invalid request")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with proper logging."""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} - {request.method} {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions with proper logging."""
    logger.error(f"Unhandled exception: {str(exc)} - {request.method} {request.url}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.hrdocs.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
