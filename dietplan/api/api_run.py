from fastapi import FastAPI, Request, Query
from fastapi.responses import JSONResponse

from datetime import datetime
from typing import Optional
import logging

from dietplan.domain.WeekDay import day_key_for
from dietplan.domain.errors import CollaboratorUnavailableError, InvalidInputError
from dietplan.events.web_observers import start as start_event_observers, get_events as get_web_events

# Routers
from dietplan.api.routes import completions, plans, progress
from dietplan.api.api_ai import router as ai_router

# Logging
logger = logging.getLogger("dietplan_app")

# Initialize FastAPI app
app = FastAPI(title="Diet Plan & Meal Tracking API")

# Include routers
app.include_router(plans.router)
app.include_router(completions.router)
app.include_router(progress.router)
app.include_router(ai_router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for client polling when the app starts."""
    start_event_observers()
    logger.info("Web observers for plan and completion events started")


# -------------------- Error mapping --------------------
@app.exception_handler(InvalidInputError)
def _invalid_input(request: Request, exc: InvalidInputError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"error": str(exc)})


@app.exception_handler(CollaboratorUnavailableError)
def _collaborator_unavailable(request: Request, exc: CollaboratorUnavailableError):
    logger.error(f"{exc.collaborator} unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": str(exc), "collaborator": exc.collaborator, "retryable": True},
    )


# -------------------- API: Today / Events --------------------
@app.get('/api/today')
def api_today():
    today = datetime.now().date()
    return {"day_key": day_key_for(today), "date": today.isoformat()}


@app.get('/api/events')
def api_events(
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """Recent plan and completion events for client polling."""
    return get_web_events(since)
