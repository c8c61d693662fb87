from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from dataclasses import replace
import logging, os, uuid, typing as t

# ---- Engine imports ----
from pathway_core.engine import AssessmentSession
from pathway_core.types import Question, QuestionResponse
from pathway_core.snapshot import MODES, TRACKS, load_snapshot
from pathway_core.branching import validate_branching
from pathway_core.validators import validate_publish_snapshot
from pathway_core.recommend import create_report_code
from pathway_core.plan import plan_for_result
from pathway_core.config import BRANCHING_MODE, load_config, max_questions
from . import storage

log = logging.getLogger(__name__)

CFG = load_config()
SNAPSHOT = load_snapshot(CFG.get("SNAPSHOT_PATH"))

app = FastAPI(title="Pathway Assessment API")


@app.get("/")
def root():
    return {"status": "ok", "service": "pathway-assessment-api"}


ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class StartReq(BaseModel):
    mode: t.Literal["JSS", "SSS"]
    track: t.Literal["SCIENCE", "ARTS", "COMMERCIAL"] | None = None
    max_questions: int | None = None
    student_id: str | None = None

class AnswerReq(BaseModel):
    question_id: str
    type: str
    option_ids: list[str] = []
    text: str | None = None

# ---- Helpers ----
def _serialize_question(q: Question | None) -> dict[str, t.Any] | None:
    if q is None:
        return None
    return {
        "id": q.id,
        "mode": q.mode,
        "type": q.type,
        "prompt": q.prompt,
        "tags": list(q.tags),
        "track": q.track,
        "illustration_url": q.illustration_url,
        # score maps stay server-side
        "options": [
            {"id": o.id, "label": o.label, "image_url": o.image_url}
            for o in SNAPSHOT.options_for(q.id)
        ],
    }


def _session_or_404(sid: str) -> AssessmentSession:
    sess = storage.load_session(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess


def _progress(sess: AssessmentSession) -> dict[str, t.Any]:
    return {
        "done": sess.done,
        "question": _serialize_question(sess.current_question()),
        "state": sess.state.to_dict(),
    }


def _store_result(sid: str, sess: AssessmentSession) -> dict[str, t.Any]:
    result = sess.finalize()
    info = storage.session_info(sid)
    while True:
        report = result.to_dict()
        report["meta"] = {
            "sessionId": sid,
            "studentId": info.get("student_id"),
            "startedAt": info.get("started_at"),
            "createdAt": storage.utcnow_iso(),
            "answered": len(sess.state.asked),
        }
        if storage.save_report(result.report_code, report):
            break
        log.warning("report code %s already taken, drawing another", result.report_code)
        result = replace(result, report_code=create_report_code())
        sess.result = result
    storage.update_session_info(sid, {"report_code": result.report_code, "finished_at": report["meta"]["createdAt"]})
    return report

# ---- Health ----
@app.get("/health")
def health():
    return {
        "status": "ok",
        "questions": len(SNAPSHOT.questions),
        "clusters": len(SNAPSHOT.clusters),
        "sessions": len(storage.SESSIONS),
        "reports": len(storage.REPORTS),
    }

# ---- Sessions ----
@app.post("/session/start")
def start(req: StartReq):
    if req.track and req.mode != BRANCHING_MODE:
        raise HTTPException(422, f"track is only valid for {BRANCHING_MODE} mode")
    cap = req.max_questions if req.max_questions is not None else max_questions(CFG)
    if cap < 1:
        raise HTTPException(422, "max_questions must be at least 1")
    sid = str(uuid.uuid4())
    sess = AssessmentSession(SNAPSHOT, req.mode, req.track, max_questions=cap)
    storage.save_session(
        sid,
        sess,
        {"mode": req.mode, "track": req.track, "student_id": req.student_id, "started_at": storage.utcnow_iso()},
    )
    log.debug("session %s started mode=%s track=%s cap=%d", sid, req.mode, req.track, cap)
    out = _progress(sess)
    out["session_id"] = sid
    return out


@app.get("/session/{sid}")
def get_session(sid: str):
    sess = _session_or_404(sid)
    out = _progress(sess)
    out["session_id"] = sid
    out["report_code"] = storage.session_info(sid).get("report_code")
    return out


@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session_or_404(sid)
    with storage.session_guard(sid):
        if storage.session_info(sid).get("report_code"):
            raise HTTPException(409, "session already finished")
        current = sess.current_question()
        if current is None:
            raise HTTPException(409, "no question is waiting for an answer")
        if req.question_id != current.id:
            raise HTTPException(409, f"question {req.question_id} is not the current question")
        if req.type != current.type:
            raise HTTPException(422, f"answer type {req.type} does not match question type {current.type}")
        sess.answer_current(QuestionResponse(type=req.type, option_ids=tuple(req.option_ids), text=req.text))
        return _progress(sess)


@app.post("/session/{sid}/undo")
def undo(sid: str):
    sess = _session_or_404(sid)
    with storage.session_guard(sid):
        if storage.session_info(sid).get("report_code"):
            raise HTTPException(409, "session already finished")
        sess.undo()
        return _progress(sess)


@app.post("/session/{sid}/finish")
def finish(sid: str):
    sess = _session_or_404(sid)
    with storage.session_guard(sid):
        stored = storage.find_report_by_session(sid)
        if stored:
            return stored
        return _store_result(sid, sess)

# ---- Reports ----
@app.get("/reports")
def list_reports():
    return {"reports": storage.list_reports()}


@app.get("/reports/{report_code}")
def get_report(report_code: str):
    report = storage.load_report(report_code)
    if not report:
        raise HTTPException(404, "report not found")
    return report


@app.post("/reports/{report_code}/plan")
def create_plan(report_code: str, force: bool = Query(False, description="Rebuild even if cached")):
    report = storage.load_report(report_code)
    if not report:
        raise HTTPException(404, "report not found")

    existing = report.get("plan")
    if existing and not force:
        return {"report_code": report["report_code"], "plan": existing}

    plan = plan_for_result(SNAPSHOT, report)
    if plan is None:
        raise HTTPException(409, f"no plan for primary cluster {report.get('primary_cluster') or '(none)'}")
    storage.update_report(report_code, {"plan": plan})
    return {"report_code": report["report_code"], "plan": plan}

# ---- Publish gate ----
@app.post("/config/validate")
def validate_config(payload: t.Any = Body(...)):
    return validate_publish_snapshot(payload)


@app.get("/config/branching")
def branching(mode: str = Query(...), track: str | None = Query(None)):
    if mode not in MODES:
        raise HTTPException(422, f"unknown mode {mode}")
    if track is not None and track not in TRACKS:
        raise HTTPException(422, f"unknown track {track}")
    report = validate_branching(SNAPSHOT, mode, track)
    return {"mode": mode, "track": track, "publish_safe": report.publish_safe, **report.to_dict()}
