"""
api/routes/v1/questions.py -- Question routes.

Routes:
  POST   /question/create                 -- create a question owned by the caller
  GET    /question/all                    -- every question, oldest first
  GET    /question/all/{user_id}          -- questions posted by one member
  PUT    /question/edit/{question_id}     -- owner only
  DELETE /question/delete/{question_id}   -- owner or admin

Every route needs a bearer token. The token is validated by QuestionService
in the same transaction as the read or write it protects, so handlers here
only translate between HTTP models and domain objects.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ContentRequest, QuestionDetailsResponse, StatusResponse
from auth.dependencies import get_bearer_token
from forum.container import ForumServices
from forum.models import Question

router = APIRouter()


def _details(question: Question) -> QuestionDetailsResponse:
    return QuestionDetailsResponse(id=question.uuid, content=question.content)


# ---------------------------------------------------------------------------
# POST /question/create
# ---------------------------------------------------------------------------


@router.post("/question/create", response_model=StatusResponse, status_code=201)
def create_question(
    request: Request,
    body: ContentRequest,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    services: ForumServices = request.app.state.services
    question = services.questions.create(token, body.content)
    return StatusResponse(id=question.uuid, status="QUESTION CREATED")


# ---------------------------------------------------------------------------
# GET /question/all, /question/all/{user_id}
# ---------------------------------------------------------------------------


@router.get("/question/all", response_model=list[QuestionDetailsResponse])
def list_questions(request: Request, token: str | None = Depends(get_bearer_token)) -> list[QuestionDetailsResponse]:
    services: ForumServices = request.app.state.services
    return [_details(q) for q in services.questions.list_all(token)]


@router.get("/question/all/{user_id}", response_model=list[QuestionDetailsResponse])
def list_questions_by_user(
    request: Request,
    user_id: str,
    token: str | None = Depends(get_bearer_token),
) -> list[QuestionDetailsResponse]:
    """List the questions posted by the member whose uuid is user_id."""
    services: ForumServices = request.app.state.services
    return [_details(q) for q in services.questions.list_by_user(token, user_id)]


# ---------------------------------------------------------------------------
# PUT /question/edit/{question_id}
# ---------------------------------------------------------------------------


@router.put("/question/edit/{question_id}", response_model=StatusResponse)
def edit_question(
    request: Request,
    question_id: str,
    body: ContentRequest,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    """Replace the content of a question. Only its owner may do this."""
    services: ForumServices = request.app.state.services
    question = services.questions.edit(token, question_id, body.content)
    return StatusResponse(id=question.uuid, status="QUESTION EDITED")


# ---------------------------------------------------------------------------
# DELETE /question/delete/{question_id}
# ---------------------------------------------------------------------------


@router.delete("/question/delete/{question_id}", response_model=StatusResponse)
def delete_question(
    request: Request,
    question_id: str,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    """Delete a question and its answers. Owner or admin."""
    services: ForumServices = request.app.state.services
    question = services.questions.delete(token, question_id)
    return StatusResponse(id=question.uuid, status="QUESTION DELETED")
