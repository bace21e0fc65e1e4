"""Main entry point for the shared terminal FastAPI application.

This module creates and configures the FastAPI app that serves the shared
terminal session: WebSocket endpoints for viewers and the external actor,
and a small REST API for inspecting and controlling the session.

To run the development server:
    uvicorn main:app --reload

Or with the configured host and port:
    python main.py
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_session, shutdown_session
from api.exceptions import (
    generic_exception_handler,
    session_shutting_down_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import actor as actor_routes
from api.routes import session as session_routes
from api.routes import viewer as viewer_routes
from config import configure_logging, load_config
from models.errors import SessionShuttingDownError

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    The configuration is loaded and the session created before the first
    request; a tree document that fails to load stops startup.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    config = load_config()
    configure_logging(config.log_level)
    logger.info("Starting terminal server - loading session...")
    session = initialize_session(config)
    logger.info(f"Session {session.session_id} ready")

    yield  # App runs and handles requests here

    logger.info("Shutting down terminal server")
    shutdown_session()


# Create the FastAPI application instance
app = FastAPI(
    title="Terminal Escape",
    description="A shared simulated terminal session with live viewers and an external actor",
    version=VERSION,
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(SessionShuttingDownError, session_shutting_down_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(viewer_routes.router)
app.include_router(actor_routes.router)
app.include_router(session_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message.

    Returns:
        A dictionary with a welcome message.
    """
    return {
        "message": "Welcome to the Terminal Escape server",
        "version": VERSION,
        "viewer_socket": "/ws",
        "actor_socket": "/ws/actor",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}


if __name__ == "__main__":
    server_config = load_config()
    configure_logging(server_config.log_level)
    uvicorn.run(app, host=server_config.host, port=server_config.server_port)
