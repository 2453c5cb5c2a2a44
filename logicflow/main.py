"""
LogicFlow - FastAPI Application Entry Point.

Serves the editing, execution and persistence interfaces of the
logic-flow engine over HTTP.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from logicflow.config import settings
from logicflow.api.routes import flows, nodes, runs
from logicflow.storage.memory import flow_storage
from logicflow.workflows.countdown import DEMO_FLOW_NAME, register_countdown_demo

# Import built-in nodes to register them
import logicflow.nodes  # noqa: F401


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if settings.LOAD_FLOWS_ON_STARTUP:
        await flow_storage.load_directory()

    # Register the demo flow
    await register_countdown_demo()

    yield

    # Shutdown
    if settings.SAVE_FLOWS_ON_SHUTDOWN:
        saved = await flow_storage.save_all()
        logger.info(f"Saved {saved} flows")
    logger.info("Shutting down...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
## Logic Flow Engine API

Build event-triggered graphs of typed computation nodes and run them.

### Features
- **Nodes**: typed computation units with inputs, outputs and branches
- **References**: inputs read constants or outputs of earlier nodes
- **Branching and Looping**: conditional successors, protected by a step ceiling
- **Undo/Redo**: every edit is reversible
- **Persistence**: flows are stored as JSON files with atomic replace

### Quick Start
1. List node types: `GET /nodes`
2. Create a flow: `POST /flows`
3. Add and wire nodes: `POST /flows/{name}/nodes`, `PUT /flows/{name}/nodes/{node}/...`
4. Run it: `POST /flows/{name}/run`

### Demo Flow
A pre-registered countdown flow is available as: `countdown-demo`
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(flows.router)
app.include_router(nodes.router)
app.include_router(runs.router)


# ============================================================
# Root Endpoints
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """API root - returns basic info and links."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "A visual logic-flow execution engine",
        "docs": "/docs",
        "redoc": "/redoc",
        "endpoints": {
            "flows": "/flows",
            "nodes": "/nodes",
            "runs": "/runs",
            "events": "/events/{event_type}",
        },
        "demo_flow": DEMO_FLOW_NAME,
    }


@app.get("/health", tags=["Root"])
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        **flow_storage.summary(),
    }


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        },
    )
