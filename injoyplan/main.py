"""FastAPI application entry point."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from injoyplan.core.config import settings
from injoyplan.core.errors import ConflictError, DomainError, ForbiddenError, InvalidInputError, NotFoundError
from injoyplan.core.logging import setup_logging
from injoyplan.db.init_db import init_db
from injoyplan.api import admin, comments, complaints, events, favorites, users


# Setup logging
setup_logging(settings.log_level)

# Initialize database
init_db()

# Create FastAPI app
app = FastAPI(
    title="Injoyplan API",
    description="Event discovery: search, favorites, comments and organizer tools",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ConflictError: 409,
    InvalidInputError: 400,
}


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Map service-layer errors to HTTP responses."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)), 400
    )
    body = {"code": exc.code.value, "message": exc.message}
    if getattr(exc, "parameter", None):
        body["parameter"] = exc.parameter
    return JSONResponse(status_code=status_code, content=body)


# Include routers
app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(comments.router, prefix="/api", tags=["comments"])
app.include_router(favorites.router, prefix="/api", tags=["favorites"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(complaints.router, prefix="/api", tags=["complaints"])
app.include_router(admin.router, prefix="/api", tags=["admin"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Injoyplan API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
