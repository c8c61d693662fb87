"""In-process registry for live assessment sessions and finished reports.

Durable persistence belongs to whatever deployment wraps this service; the
API only needs lookups by session id and by report code. Each session carries
its own lock so one answer/undo per session is in flight at a time.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from pathway_core.engine import AssessmentSession


_LOCK = threading.Lock()

SESSIONS: Dict[str, AssessmentSession] = {}
SESSION_INFO: Dict[str, Dict[str, Any]] = {}
REPORTS: Dict[str, Dict[str, Any]] = {}
_SESSION_LOCKS: Dict[str, threading.Lock] = {}


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_session(session_id: str, session: AssessmentSession, info: Dict[str, Any]) -> None:
    with _LOCK:
        SESSIONS[session_id] = session
        SESSION_INFO[session_id] = dict(info)
        _SESSION_LOCKS.setdefault(session_id, threading.Lock())


def load_session(session_id: str) -> Optional[AssessmentSession]:
    with _LOCK:
        return SESSIONS.get(session_id)


def session_info(session_id: str) -> Dict[str, Any]:
    with _LOCK:
        return dict(SESSION_INFO.get(session_id) or {})


def update_session_info(session_id: str, updates: Dict[str, Any]) -> None:
    with _LOCK:
        if session_id in SESSION_INFO:
            SESSION_INFO[session_id].update(updates)


@contextmanager
def session_guard(session_id: str) -> Iterator[None]:
    with _LOCK:
        lock = _SESSION_LOCKS.setdefault(session_id, threading.Lock())
    with lock:
        yield


def save_report(report_code: str, report: Dict[str, Any]) -> bool:
    """Store under `report_code`; False when that code is already taken."""

    with _LOCK:
        if report_code in REPORTS:
            return False
        REPORTS[report_code] = report
        return True


def load_report(report_code: str) -> Optional[Dict[str, Any]]:
    with _LOCK:
        return REPORTS.get(report_code.upper())


def update_report(report_code: str, updates: Dict[str, Any]) -> None:
    with _LOCK:
        report = REPORTS.get(report_code.upper())
        if report is not None:
            report.update(updates)


def find_report_by_session(session_id: str) -> Optional[Dict[str, Any]]:
    with _LOCK:
        for report in REPORTS.values():
            if (report.get("meta") or {}).get("sessionId") == session_id:
                return report
    return None


def list_reports() -> List[Dict[str, Any]]:
    with _LOCK:
        out = [dict(r.get("meta") or {}, report_code=code) for code, r in REPORTS.items()]
    out.sort(key=lambda r: r.get("createdAt", ""), reverse=True)
    return out


def clear() -> None:
    with _LOCK:
        SESSIONS.clear()
        SESSION_INFO.clear()
        REPORTS.clear()
        _SESSION_LOCKS.clear()
