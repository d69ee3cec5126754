#!/usr/bin/env python3
"""
Inspect the Naapim database: sessions with their answers, tracking codes and outcomes.

Usage:
  python -m naapim.scripts.inspect_db

Notes:
- Safe read-only inspection; makes no writes.
- Question text is masked before printing.
"""

import os
import sys
from datetime import datetime

# Allow running from repo root or from naapim/
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from naapim.data.database import SessionLocal
from naapim.data.models import DecisionSession, Outcome, QuestionFeedback, Response, Result
from naapim.utils.security import preview


def line(ch: str = "-", width: int = 60) -> str:
    return ch * width


def _fmt(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M") if dt else "N/A"


def print_sessions(session):
    print(line("="))
    print("Sessions (with answers and tracking codes)")
    print(line("="))
    sessions = session.query(DecisionSession).order_by(DecisionSession.created_at).all()
    print(f"Total sessions: {len(sessions)}")
    for s in sessions:
        print(f"\nSession {s.id} | archetype={s.archetype_id} | status={s.status.value} | created={_fmt(s.created_at)}")
        print(f"  Question: {preview(s.user_question, 80)}")

        answers = session.query(Response).filter(Response.session_id == s.id).all()
        print(f"  Answers: {len(answers)}")
        for a in answers:
            print(f"    - {a.field_key} = {a.option_id}")

        result = session.query(Result).filter(Result.session_id == s.id).first()
        if result:
            has_analysis = "yes" if result.analysis_json else "no"
            print(f"  Result → code={result.tracking_code} | decision={result.decision} | analysis={has_analysis}")
        else:
            print("  Result → (missing)")
    print()


def print_outcomes(session):
    print(line("="))
    print("Outcomes")
    print(line("="))
    outcomes = session.query(Outcome).order_by(Outcome.created_at.desc()).all()
    print(f"Total outcomes: {len(outcomes)}")
    for o in outcomes:
        feeling = o.feeling.value if o.feeling else "(none)"
        vector = f"{len(o.embedding)}d" if o.embedding else "none"
        print(
            f"- {o.id} | session={o.session_id or '(seeded)'} | {o.outcome_type.value} | feeling={feeling} "
            f"| archetype={o.archetype_id} | embedding={vector}"
        )
        if o.outcome_text:
            print(f"    {preview(o.outcome_text, 80)}")
    print()


def print_feedback(session):
    print(line("="))
    print("Question feedback")
    print(line("="))
    rows = session.query(QuestionFeedback).order_by(QuestionFeedback.archetype_id, QuestionFeedback.field_key).all()
    print(f"Total feedback rows: {len(rows)}")
    for r in rows:
        print(f"- {r.archetype_id}/{r.field_key}: {r.feedback.value} (session={r.session_id or '(anonymous)'})")
    print()


def main():
    session = SessionLocal()
    try:
        print(f"DB Inspection: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print_sessions(session)
        print_outcomes(session)
        print_feedback(session)
        print(line("="))
        print("End of database inspection")
        print(line("="))
    finally:
        session.close()


if __name__ == "__main__":
    main()
