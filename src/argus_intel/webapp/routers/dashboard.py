"""
Dashboard API router.

Every mutating endpoint returns the refreshed panel, so the front end only
ever renders what ``describe_panel`` decided.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from argus_intel.core.exceptions import InvalidSubjectError
from argus_intel.core.schemas import TargetKind
from argus_intel.core.session import AnalysisSession

router = APIRouter()
logger = logging.getLogger(__name__)


class TargetRequest(BaseModel):
    target: TargetKind


class SearchRequest(BaseModel):
    subject: str
    target: Optional[TargetKind] = None


class LanguageRequest(BaseModel):
    language: str


def get_session(request: Request) -> AnalysisSession:
    return request.app.state.session


@router.get("/state")
async def get_state(session: AnalysisSession = Depends(get_session)) -> Dict[str, Any]:
    return session.export_panel()


@router.post("/target")
async def select_target(
    payload: TargetRequest, session: AnalysisSession = Depends(get_session)
) -> Dict[str, Any]:
    session.select_target(payload.target)
    return session.export_panel()


@router.post("/search")
async def run_search(
    payload: SearchRequest, session: AnalysisSession = Depends(get_session)
) -> Dict[str, Any]:
    try:
        await session.search(payload.subject, target=payload.target)
    except InvalidSubjectError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return session.export_panel()


@router.post("/upload")
async def upload_image(
    file: UploadFile = File(...), session: AnalysisSession = Depends(get_session)
) -> Dict[str, Any]:
    data = await file.read()
    logger.info("Received upload '%s' (%d bytes).", file.filename, len(data))
    await run_in_threadpool(session.upload, file.filename or "upload", data)
    return session.export_panel()


@router.post("/reliability")
async def run_reliability(
    session: AnalysisSession = Depends(get_session),
) -> Dict[str, Any]:
    if not session.can_run_reliability():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=session.localizer.text("errors.reliabilityUnavailable"),
        )
    await session.run_reliability()
    return session.export_panel()


@router.post("/reset")
async def new_search(session: AnalysisSession = Depends(get_session)) -> Dict[str, Any]:
    session.new_search()
    return session.export_panel()


@router.post("/language")
async def set_language(
    payload: LanguageRequest, session: AnalysisSession = Depends(get_session)
) -> Dict[str, Any]:
    try:
        session.set_language(payload.language)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return session.export_panel()


@router.get("/export")
async def export_panel(session: AnalysisSession = Depends(get_session)) -> JSONResponse:
    if not session.view().can_export:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=session.localizer.text("errors.nothingToExport"),
        )
    filename = session.export_filename()
    return JSONResponse(
        content=session.export_panel(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/i18n/{key}")
async def translate(
    key: str, session: AnalysisSession = Depends(get_session)
) -> Dict[str, Any]:
    return {"key": key, "value": session.localizer.lookup(key)}
