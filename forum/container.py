"""
forum/container.py -- Builds the repositories and services from Settings.

The API lifespan calls build_services() once and parks the result on
app.state; tests call it directly with an in-memory Database. Nothing else
constructs services, so policy switches from Settings reach every operation
through this one place.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from auth.authenticator import Authenticator
from auth.guard import AccessGuard
from auth.models import ROLE_ADMIN, SignupCandidate, User
from auth.store import SessionStore, UserStore
from core.config import Settings
from core.database import Database, utcnow
from forum.services import AnswerService, QuestionService, UserService
from forum.store import AnswerStore, QuestionStore


@dataclass
class ForumServices:
    db: Database
    authenticator: Authenticator
    guard: AccessGuard
    questions: QuestionService
    answers: AnswerService
    users: UserService


def build_services(settings: Settings, db: Database, clock: Callable[[], datetime] = utcnow) -> ForumServices:
    """Wire stores and services. clock is injectable so tests can move time."""
    user_store = UserStore()
    session_store = SessionStore()
    question_store = QuestionStore()
    answer_store = AnswerStore()

    guard = AccessGuard(
        user_store,
        session_store,
        reject_expired=settings.reject_expired_sessions,
        admin_can_edit=settings.admin_can_edit,
        clock=clock,
    )
    return ForumServices(
        db=db,
        authenticator=Authenticator(
            db,
            user_store,
            session_store,
            session_ttl=timedelta(seconds=settings.session_ttl_seconds),
            clock=clock,
        ),
        guard=guard,
        questions=QuestionService(db, guard, question_store, user_store, clock=clock),
        answers=AnswerService(db, guard, answer_store, question_store, clock=clock),
        users=UserService(db, guard, user_store, session_store, clock=clock),
    )


def create_admin(services: ForumServices, username: str, email: str, password: str) -> User:
    """Provision an admin account. Trusted callers only -- never exposed over HTTP."""
    candidate = SignupCandidate(username=username, email=email, password=password)
    return services.authenticator.signup(candidate, role=ROLE_ADMIN)
