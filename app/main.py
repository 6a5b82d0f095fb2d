import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from app.config import settings
from app.database import engine, Base, SessionLocal
from app.routes import admin, book, rental
from app.services.errors import BookshopError
from app.services.seed import seed_books
from app.services.sweeper import sweeper

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests."""
    async def dispatch(self, request: Request, call_next):
        admin_key = request.headers.get("X-Admin-Key")
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip} - Admin key: {'Present' if admin_key else 'Missing'}")
        
        response = await call_next(request)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager: create tables, seed the catalog and run the sweeper."""
    Base.metadata.create_all(bind=engine)
    
    if settings.seed_example_books:
        db = SessionLocal()
        try:
            seed_books(db)
        finally:
            db.close()
    
    if settings.sweeper_enabled:
        logger.info("Starting rental sweeper...")
        sweeper.start()
    
    yield
    
    if settings.sweeper_enabled:
        logger.info("Stopping rental sweeper...")
        sweeper.stop()


app = FastAPI(
    title="Bookshop Rental API",
    description="Book catalog with rentals, purchases and an admin management surface",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Logging middleware (last, to log everything)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(BookshopError)
async def bookshop_error_handler(request: Request, exc: BookshopError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = ".".join(str(part) for part in errors[0]["loc"] if part != "body") if errors else ""
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"{field}: {message}" if field else message}
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal error"}
    )


# Include routers
app.include_router(book.router)
app.include_router(rental.router)
app.include_router(admin.router)

@app.get("/")
async def root():
    return {"message": "Bookshop Rental API", "version": "1.0.0"}

@app.get("/api/health")
async def health_check():
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
