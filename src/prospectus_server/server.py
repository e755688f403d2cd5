"""FastAPI REST API for prospectus structure extraction."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .logger import logger
from .structure import (
    DecodeError,
    Document,
    StructureExtractor,
    UpstreamServiceError,
    get_structure_extractor,
)

# Maximum file size for uploads (50MB)
MAX_UPLOAD_SIZE = 50 * 1024 * 1024


# --- Response Models ---


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    code: str
    message: str


# --- App State ---

_extractor: StructureExtractor | None = None


def get_extractor() -> StructureExtractor:
    """Lazy initialization of the configured structure extractor."""
    global _extractor
    if _extractor is None:
        _extractor = get_structure_extractor()
    return _extractor


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("starting server", extractor=type(get_extractor()).__name__)
    yield
    logger.info("server shutdown")


app = FastAPI(
    title="Prospectus Structure API",
    description="Section extraction for prospectus PDFs",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Exception Handlers ---


@app.exception_handler(DecodeError)
async def decode_error_handler(request, exc: DecodeError):
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(code="DECODE_ERROR", message=str(exc)).model_dump(),
    )


@app.exception_handler(UpstreamServiceError)
async def upstream_error_handler(request, exc: UpstreamServiceError):
    return JSONResponse(
        status_code=502,
        content=ErrorResponse(code="UPSTREAM_ERROR", message=str(exc)).model_dump(),
    )


# --- Health Endpoints ---


@app.get("/health", response_model=HealthResponse)
def health():
    """Liveness check."""
    return HealthResponse(status="healthy")


# --- Structure Endpoints ---


@app.post(
    "/api/v1/documents/structure",
    response_model=Document,
    response_model_exclude_none=True,
)
def extract_document_structure(file: UploadFile = File(...)):
    """Extract the ordered sections of an uploaded PDF."""
    file_name = file.filename or "unknown.pdf"
    if not file_name.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    # Read one byte past the limit to detect oversized uploads
    data = file.file.read(MAX_UPLOAD_SIZE + 1)
    if len(data) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
        )

    if not data.startswith(b"%PDF-"):
        raise HTTPException(
            status_code=400,
            detail="Invalid PDF file. File does not have valid PDF header.",
        )

    logger.info("structure requested", file_name=file_name, file_size=len(data))
    return get_extractor().extract(data, file_name)
