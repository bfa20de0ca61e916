"""
Analysis routes - upload and analyze, session result, retry, clear
Supports CSV/TSV/TXT, Excel, JSON and JSON Lines uploads
"""
from fastapi import APIRouter, UploadFile, File, Form, Request
from typing import Optional
from loguru import logger

from exceptions import AnalyzerException, FileTooLargeError, file_too_large, not_found, to_http_exception
from models.ethics import AnalysisResult
from services.data_formats import CONVERTIBLE_FORMATS, DatasetFile, SUPPORTED_FORMATS
from services.session import SessionRegistry

router = APIRouter(prefix="/analysis", tags=["analysis"])


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _respond(session_id: str, result: AnalysisResult) -> dict:
    return {"sessionId": session_id, "result": result.model_dump(mode="json", by_alias=True)}


@router.get("/formats")
async def list_formats():
    """Formats analyzed automatically and formats that need converting first"""
    return {"supported": SUPPORTED_FORMATS, "convertible": CONVERTIBLE_FORMATS}


@router.post("/upload")
async def upload_and_analyze(
    request: Request,
    file: UploadFile = File(...),
    project_id: Optional[str] = Form(None),
    session_id: Optional[str] = Form(None),
):
    """
    Analyze an uploaded dataset.
    Replaces any previous result held by the session.
    """
    registry = get_registry(request)

    # Reject oversized uploads before pulling the body into memory
    limit = registry.policy_for(session_id).max_file_bytes
    if file.size is not None and file.size > limit:
        error = FileTooLargeError(file.size, limit)
        logger.warning(f"Rejected {file.filename}: {error.message}")
        raise file_too_large(error.message)

    content = await file.read()
    session = registry.get_or_create(session_id, project_id)

    try:
        result = await session.analyze_upload(DatasetFile(filename=file.filename or "", content=content))
    except AnalyzerException as e:
        logger.error(f"Failed to analyze {file.filename}: {e.message}")
        raise to_http_exception(e)

    return _respond(session.session_id, result)


@router.get("/{session_id}")
async def get_result(session_id: str, request: Request):
    """Current result of a session"""
    session = get_registry(request).get(session_id)
    if session is None or session.result is None:
        raise not_found("Analysis session", session_id)
    return _respond(session_id, session.result)


@router.post("/{session_id}/retry-ethics")
async def retry_ethics(session_id: str, request: Request):
    """Ask the ethical analysis service again for the current dataset"""
    session = get_registry(request).get(session_id)
    if session is None or session.result is None:
        raise not_found("Analysis session", session_id)

    result = await session.retry_ethical_analysis()
    return _respond(session_id, result)


@router.delete("/{session_id}")
async def clear_session(session_id: str, request: Request):
    """Drop a session and its result"""
    if not get_registry(request).remove(session_id):
        raise not_found("Analysis session", session_id)

    logger.info(f"Cleared analysis session {session_id}")
    return {"status": "deleted", "id": session_id}
