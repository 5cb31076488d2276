"""
api/routes/v1/answers.py -- Answer routes.

Routes:
  POST   /question/{question_id}/answer/create  -- answer an existing question
  PUT    /answer/edit/{answer_id}               -- owner only
  DELETE /answer/delete/{answer_id}             -- owner or admin
  GET    /answer/all/{question_id}              -- answers to one question

All routes need a bearer token; see api/routes/v1/questions.py for how it is
checked.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AnswerDetailsResponse, ContentRequest, StatusResponse
from auth.dependencies import get_bearer_token
from forum.container import ForumServices

router = APIRouter()


@router.post("/question/{question_id}/answer/create", response_model=StatusResponse, status_code=201)
def create_answer(
    request: Request,
    question_id: str,
    body: ContentRequest,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    services: ForumServices = request.app.state.services
    answer = services.answers.create(token, question_id, body.content)
    return StatusResponse(id=answer.uuid, status="ANSWER CREATED")


@router.put("/answer/edit/{answer_id}", response_model=StatusResponse)
def edit_answer(
    request: Request,
    answer_id: str,
    body: ContentRequest,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    services: ForumServices = request.app.state.services
    answer = services.answers.edit(token, answer_id, body.content)
    return StatusResponse(id=answer.uuid, status="ANSWER EDITED")


@router.delete("/answer/delete/{answer_id}", response_model=StatusResponse)
def delete_answer(
    request: Request,
    answer_id: str,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    services: ForumServices = request.app.state.services
    answer = services.answers.delete(token, answer_id)
    return StatusResponse(id=answer.uuid, status="ANSWER DELETED")


@router.get("/answer/all/{question_id}", response_model=list[AnswerDetailsResponse])
def list_answers(
    request: Request,
    question_id: str,
    token: str | None = Depends(get_bearer_token),
) -> list[AnswerDetailsResponse]:
    """Answers to one question, each paired with the question text."""
    services: ForumServices = request.app.state.services
    return [
        AnswerDetailsResponse(id=a.uuid, question_content=a.question_content or "", answer_content=a.content)
        for a in services.answers.list_for_question(token, question_id)
    ]
