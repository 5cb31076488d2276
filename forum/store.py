"""
forum/store.py -- SQLAlchemy Core persistence layer for questions and answers.

Pattern: Repository + Data Mapper, one repository per entity. Methods take the
caller's Connection and never commit; get_* return None on absence.

List ordering: created_at, then id. Timestamps can collide at microsecond
resolution under load, so the primary key breaks ties and keeps every
snapshot deterministic.
"""

from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Connection

from core.database import answers, from_iso, questions, to_iso
from forum.models import Answer, Question


class QuestionStore:
    def insert(self, conn: Connection, question: Question) -> Question:
        result = conn.execute(
            questions.insert().values(
                uuid=question.uuid,
                user_id=question.user_id,
                content=question.content,
                created_at=to_iso(question.created_at),
            )
        )
        question.id = result.inserted_primary_key[0]
        return question

    def get_by_uuid(self, conn: Connection, question_uuid: str) -> Question | None:
        row = conn.execute(select(questions).where(questions.c.uuid == question_uuid)).fetchone()
        return _row_to_question(row) if row is not None else None

    def update_content(self, conn: Connection, question_id: int, content: str) -> bool:
        """Replace the content of a question. id, owner and created_at are untouched."""
        result = conn.execute(update(questions).where(questions.c.id == question_id).values(content=content))
        return result.rowcount > 0

    def delete(self, conn: Connection, question_id: int) -> bool:
        """Hard-delete a question together with all of its answers."""
        conn.execute(delete(answers).where(answers.c.question_id == question_id))
        result = conn.execute(delete(questions).where(questions.c.id == question_id))
        return result.rowcount > 0

    def list_all(self, conn: Connection) -> list[Question]:
        rows = conn.execute(select(questions).order_by(questions.c.created_at, questions.c.id)).fetchall()
        return [_row_to_question(r) for r in rows]

    def list_by_owner(self, conn: Connection, user_id: int) -> list[Question]:
        rows = conn.execute(
            select(questions).where(questions.c.user_id == user_id).order_by(questions.c.created_at, questions.c.id)
        ).fetchall()
        return [_row_to_question(r) for r in rows]


class AnswerStore:
    def insert(self, conn: Connection, answer: Answer) -> Answer:
        result = conn.execute(
            answers.insert().values(
                uuid=answer.uuid,
                user_id=answer.user_id,
                question_id=answer.question_id,
                content=answer.content,
                created_at=to_iso(answer.created_at),
            )
        )
        answer.id = result.inserted_primary_key[0]
        return answer

    def get_by_uuid(self, conn: Connection, answer_uuid: str) -> Answer | None:
        row = conn.execute(select(answers).where(answers.c.uuid == answer_uuid)).fetchone()
        return _row_to_answer(row) if row is not None else None

    def update_content(self, conn: Connection, answer_id: int, content: str) -> bool:
        """Replace the content of an answer. Owner, question and created_at are untouched."""
        result = conn.execute(update(answers).where(answers.c.id == answer_id).values(content=content))
        return result.rowcount > 0

    def delete(self, conn: Connection, answer_id: int) -> bool:
        result = conn.execute(delete(answers).where(answers.c.id == answer_id))
        return result.rowcount > 0

    def list_by_question(self, conn: Connection, question_id: int) -> list[Answer]:
        """Return all answers to a question with the question text joined in."""
        stmt = (
            select(answers, questions.c.content.label("question_content"))
            .join(questions, answers.c.question_id == questions.c.id)
            .where(answers.c.question_id == question_id)
            .order_by(answers.c.created_at, answers.c.id)
        )
        rows = conn.execute(stmt).fetchall()
        return [_row_to_answer(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_question(row) -> Question:
    return Question(
        id=row.id,
        uuid=row.uuid,
        user_id=row.user_id,
        content=row.content,
        created_at=from_iso(row.created_at),
    )


def _row_to_answer(row) -> Answer:
    # question_content is only present on rows from list_by_question().
    return Answer(
        id=row.id,
        uuid=row.uuid,
        user_id=row.user_id,
        question_id=row.question_id,
        content=row.content,
        created_at=from_iso(row.created_at),
        question_content=getattr(row, "question_content", None),
    )
