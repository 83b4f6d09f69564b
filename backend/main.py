"""
FastAPI backend for the places lead finder.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from backend.middleware.request_log import RequestLogMiddleware
from backend.models.schemas import HealthResponse
from backend.routes.search import router as search_router
from backend.routes.viewer import router as viewer_router
from places_leads.config import warn_if_unconfigured


@asynccontextmanager
async def lifespan(app: FastAPI):
    warn_if_unconfigured()
    yield


app = FastAPI(
    title="Places Lead Finder API",
    description="Places text-search relay and lead-ranked viewer",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_router)
app.include_router(viewer_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.get("/", include_in_schema=False)
def index():
    return RedirectResponse(url="/viewer")


@app.get("/health", response_model=HealthResponse)
def health():
    """Health check endpoint."""
    return {"status": "ok"}
