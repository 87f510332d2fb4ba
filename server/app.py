"""FastAPI application for the n8n orchestrator."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orchestrator.errors import ChangeSetError, ConfigurationError, PersonaFormatError, UpstreamError
from server.agent_routes import router as agent_router
from server.ai_routes import router as ai_router
from server.chat_routes import SESSION_HEADER
from server.chat_routes import router as chat_router
from server.db import init_all
from server.session_routes import router as session_router
from server.settings_routes import router as settings_router
from server.workflow_routes import router as workflow_router

load_dotenv()  # load environment variables from .env file

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# CORS origins - configurable via environment variable
# Use comma-separated values for multiple origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_all()
    yield


app = FastAPI(
    title="n8n Orchestrator API",
    description="Chat with an LLM that can inspect, update and run n8n workflows",
    version="0.2.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER],
)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(PersonaFormatError)
async def persona_format_error_handler(request: Request, exc: PersonaFormatError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ChangeSetError)
async def change_set_error_handler(request: Request, exc: ChangeSetError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# include routes
app.include_router(chat_router, prefix="/api")
app.include_router(session_router, prefix="/api")
app.include_router(agent_router, prefix="/api")
app.include_router(workflow_router, prefix="/api")
app.include_router(settings_router, prefix="/api")
app.include_router(ai_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.2.0",
        "endpoints": {
            "chat": "/api/chat",
            "sessions": "/api/chat/sessions",
            "agents": "/api/agents",
            "workflows": "/api/n8n/workflows",
            "executions": "/api/n8n/executions",
            "settings": "/api/settings",
            "models": "/api/ai/models",
            "plan": "/api/ai/plan",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
