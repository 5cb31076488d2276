"""
forum/services.py -- Question, answer, and member-profile operations.

Every operation follows the same template inside one transaction:
  1. guard.authenticate(token)        -> NotSignedIn / SignedOut / SessionExpired
  2. fetch the target, if any          -> QuestionNotFound / AnswerNotFound / UserNotFound
  3. apply the authorization predicate -> Forbidden
       create: none   edit: owner only   delete: owner or admin   list: none
  4. mutate or read, return the entity or collection

Create binds id, timestamp and owner server-side; the caller only supplies
content. Edit replaces content and nothing else. Delete is a hard delete.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from auth.guard import AccessGuard
from auth.models import User
from auth.store import SessionStore, UserStore
from auth.tokens import generate_uuid
from core.database import Database, utcnow
from core.errors import AnswerNotFound, QuestionNotFound, UserNotFound
from forum.models import Answer, Question
from forum.store import AnswerStore, QuestionStore

logger = logging.getLogger("forum.content")


class QuestionService:
    def __init__(
        self,
        db: Database,
        guard: AccessGuard,
        questions: QuestionStore,
        users: UserStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.guard = guard
        self.questions = questions
        self.users = users
        self.clock = clock

    def create(self, token: str, content: str) -> Question:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            question = Question(
                uuid=generate_uuid(),
                user_id=principal.user_id,
                content=content,
                created_at=self.clock(),
            )
            self.questions.insert(conn, question)
        logger.info("Question %s created by user %s", question.uuid, principal.user.uuid)
        return question

    def list_all(self, token: str) -> list[Question]:
        with self.db.transaction() as conn:
            self.guard.authenticate(conn, token)
            return self.questions.list_all(conn)

    def list_by_user(self, token: str, user_uuid: str) -> list[Question]:
        with self.db.transaction() as conn:
            self.guard.authenticate(conn, token)
            user = self.users.get_by_uuid(conn, user_uuid)
            if user is None:
                raise UserNotFound("User with entered uuid whose question details are to be seen does not exist.")
            return self.questions.list_by_owner(conn, user.id)

    def edit(self, token: str, question_uuid: str, content: str) -> Question:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            question = self.questions.get_by_uuid(conn, question_uuid)
            if question is None:
                raise QuestionNotFound()
            self.guard.require_owner_for_edit(
                principal, question.user_id, "Only the question owner can edit the question."
            )
            self.questions.update_content(conn, question.id, content)
            question.content = content
        logger.info("Question %s edited by user %s", question.uuid, principal.user.uuid)
        return question

    def delete(self, token: str, question_uuid: str) -> Question:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            question = self.questions.get_by_uuid(conn, question_uuid)
            if question is None:
                raise QuestionNotFound()
            self.guard.require_owner_or_admin(
                principal, question.user_id, "Only the question owner or admin can delete the question."
            )
            self.questions.delete(conn, question.id)
        logger.info("Question %s deleted by user %s", question.uuid, principal.user.uuid)
        return question


class AnswerService:
    def __init__(
        self,
        db: Database,
        guard: AccessGuard,
        answers: AnswerStore,
        questions: QuestionStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.guard = guard
        self.answers = answers
        self.questions = questions
        self.clock = clock

    def create(self, token: str, question_uuid: str, content: str) -> Answer:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            question = self.questions.get_by_uuid(conn, question_uuid)
            if question is None:
                raise QuestionNotFound("The question entered is invalid.")
            answer = Answer(
                uuid=generate_uuid(),
                user_id=principal.user_id,
                question_id=question.id,
                content=content,
                created_at=self.clock(),
                question_content=question.content,
            )
            self.answers.insert(conn, answer)
        logger.info("Answer %s created on question %s", answer.uuid, question.uuid)
        return answer

    def edit(self, token: str, answer_uuid: str, content: str) -> Answer:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            answer = self.answers.get_by_uuid(conn, answer_uuid)
            if answer is None:
                raise AnswerNotFound()
            self.guard.require_owner_for_edit(principal, answer.user_id, "Only the answer owner can edit the answer.")
            self.answers.update_content(conn, answer.id, content)
            answer.content = content
        logger.info("Answer %s edited by user %s", answer.uuid, principal.user.uuid)
        return answer

    def delete(self, token: str, answer_uuid: str) -> Answer:
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            answer = self.answers.get_by_uuid(conn, answer_uuid)
            if answer is None:
                raise AnswerNotFound()
            self.guard.require_owner_or_admin(
                principal, answer.user_id, "Only the answer owner or admin can delete the answer."
            )
            self.answers.delete(conn, answer.id)
        logger.info("Answer %s deleted by user %s", answer.uuid, principal.user.uuid)
        return answer

    def list_for_question(self, token: str, question_uuid: str) -> list[Answer]:
        with self.db.transaction() as conn:
            self.guard.authenticate(conn, token)
            question = self.questions.get_by_uuid(conn, question_uuid)
            if question is None:
                raise QuestionNotFound(
                    "The question with entered uuid whose details are to be seen does not exist."
                )
            return self.answers.list_by_question(conn, question.id)


class UserService:
    """Member profile look-up and admin-only account removal."""

    def __init__(
        self,
        db: Database,
        guard: AccessGuard,
        users: UserStore,
        sessions: SessionStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.guard = guard
        self.users = users
        self.sessions = sessions
        self.clock = clock

    def get_profile(self, token: str, user_uuid: str) -> User:
        with self.db.transaction() as conn:
            self.guard.authenticate(conn, token)
            user = self.users.get_by_uuid(conn, user_uuid)
            if user is None:
                raise UserNotFound()
            return user

    def delete_user(self, token: str, user_uuid: str) -> User:
        """Delete a member and all of their sessions and content. Admin only."""
        with self.db.transaction() as conn:
            principal = self.guard.authenticate(conn, token)
            self.guard.require_admin(principal, "Unauthorized Access, Entered user is not an admin.")
            user = self.users.get_by_uuid(conn, user_uuid)
            if user is None:
                raise UserNotFound("User with entered uuid to be deleted does not exist.")
            now = self.clock()
            revoked = sum(1 for s in self.sessions.list_for_user(conn, user.id) if s.is_active(now))
            self.users.delete(conn, user.id)
        logger.info("User %s deleted by admin %s (%d active sessions revoked)", user.uuid, principal.user.uuid, revoked)
        return user
