"""
Report routes: stored test runs, session log and exports.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from dependencies import (
    get_config,
    get_exporter,
    get_report_service,
    read_json_body,
    require_auth,
    require_session,
    set_session_cookie,
)
from intent_core.config import Config
from intent_core.exceptions import RequestValidationFailed
from intent_core.exporters import EXPORT_FORMATS, ResultsExporter
from intent_core.reports import ReportService
from intent_core.sessions import ResolvedSession, Session

report_router = APIRouter(prefix="/test", tags=["Reports"])

MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


@report_router.get("/report")
def get_report(
    testId: Optional[str] = None,
    session: Session = Depends(require_session),
    reports: ReportService = Depends(get_report_service),
):
    """One TestRun by id, or summaries of all runs when no id is given."""
    if testId:
        return {"success": True, "data": reports.get_report(testId, session)}
    return {"success": True, "data": reports.list_reports(session)}


@report_router.get("/session-log")
def get_session_log(session: Session = Depends(require_session)):
    return {"success": True, "data": ReportService.session_log(session)}


@report_router.post("/export")
def export_results(
    request: Request,
    body: Dict[str, Any] = Depends(read_json_body),
    auth: ResolvedSession = Depends(require_auth),
    reports: ReportService = Depends(get_report_service),
    exporter: ResultsExporter = Depends(get_exporter),
    config: Config = Depends(get_config),
):
    test_id = body.get("testId") or request.query_params.get("testId")
    export_format = (body.get("format") or request.query_params.get("format") or "json").lower()
    if not test_id:
        raise RequestValidationFailed("Test ID is required")
    if export_format not in EXPORT_FORMATS:
        raise RequestValidationFailed(f"Unsupported export format: {export_format}")

    record = reports.get_report(str(test_id), auth.session)
    filename = exporter.filename(record.get("id") or str(test_id), export_format)
    response = Response(
        content=exporter.export(record, export_format),
        media_type=MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
    if auth.created:
        set_session_cookie(response, auth.session.session_id, config)
    return response
