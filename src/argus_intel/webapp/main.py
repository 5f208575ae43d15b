import logging
from typing import Optional

from fastapi import FastAPI

from argus_intel.core.config_loader import CONFIG
from argus_intel.core.session import AnalysisSession
from argus_intel.webapp.routers import dashboard

logger = logging.getLogger(__name__)


def create_app(session: Optional[AnalysisSession] = None) -> FastAPI:
    """
    Builds the dashboard API around a single analysis session.

    The dashboard is single-user: every request reads and updates the same session.
    """
    app = FastAPI(title=CONFIG.app_name, version=CONFIG.version)
    app.state.session = session if session is not None else AnalysisSession()
    app.include_router(dashboard.router, prefix="/api", tags=["dashboard"])
    return app


app = create_app()
