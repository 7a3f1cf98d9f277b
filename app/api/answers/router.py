from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.answers.schemas import (
    AnswerResponse,
    DigestResponse,
    GenerateRequest,
    GenerateResponse,
    HistoryResponse,
    ParseRequest,
    ParseResponse,
    SuggestRequest,
    SuggestResponse,
)
from app.api.dependencies import get_workspace
from app.services.answer_generator import GenerationError
from app.services.exporters import MEDIA_TYPES, ExportError, export_filename, render_answer
from app.services.question_parser import count_questions, parse_questions
from app.services.workspace import (
    AnswerNotFoundError,
    AnswerWorkspace,
    GenerationInProgressError,
    QuestionValidationError,
)


router = APIRouter(prefix="/answers", tags=["answers"])


@router.post("/parse", response_model=ParseResponse)
async def parse_endpoint(request: ParseRequest) -> ParseResponse:
    questions = parse_questions(request.text, request.batch_mode)
    return ParseResponse(questions=questions, count=len(questions))


@router.post("/generate", response_model=GenerateResponse, status_code=status.HTTP_201_CREATED)
def generate_endpoint(
    request: GenerateRequest,
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> GenerateResponse:
    try:
        answers = workspace.generate(
            request.text,
            marks=request.marks,
            style=request.style,
            batch_mode=request.batch_mode,
        )
    except QuestionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except GenerationInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=workspace.error or str(exc)) from exc

    return GenerateResponse(
        answers=[AnswerResponse.from_answer(answer) for answer in answers],
        current_answer_id=answers[-1].id,
        history_count=len(workspace.history),
    )


@router.get("/current", response_model=AnswerResponse)
async def current_answer(workspace: AnswerWorkspace = Depends(get_workspace)) -> AnswerResponse:
    if workspace.current_answer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No answer selected")
    return AnswerResponse.from_answer(workspace.current_answer)


@router.put("/current/{answer_id}", response_model=AnswerResponse)
async def select_answer(answer_id: str, workspace: AnswerWorkspace = Depends(get_workspace)) -> AnswerResponse:
    try:
        answer = workspace.select_answer(answer_id)
    except AnswerNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AnswerResponse.from_answer(answer)


@router.get("/history", response_model=HistoryResponse)
async def list_history(workspace: AnswerWorkspace = Depends(get_workspace)) -> HistoryResponse:
    return HistoryResponse(
        items=[AnswerResponse.from_answer(item) for item in workspace.history],
        capacity=workspace.store.history.capacity,
    )


@router.get("/history/digest", response_model=DigestResponse)
async def history_digest(workspace: AnswerWorkspace = Depends(get_workspace)) -> DigestResponse:
    return DigestResponse(text=workspace.copy_all_text())


@router.delete("/history/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history_item(answer_id: str, workspace: AnswerWorkspace = Depends(get_workspace)) -> Response:
    try:
        workspace.delete_history_item(answer_id)
    except AnswerNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{answer_id}/export/{fmt}")
def export_answer(
    answer_id: str,
    fmt: Literal["pdf", "docx", "doc"],
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> Response:
    answer = workspace.store.history.get(answer_id)
    if answer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Answer {answer_id!r} not found")

    try:
        content = render_answer(answer, fmt)
    except ExportError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{export_filename(answer, fmt)}"'},
    )


@router.post("/suggest", response_model=SuggestResponse)
def suggest_endpoint(
    request: SuggestRequest,
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> SuggestResponse:
    if not request.topic.strip():
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Topic is required")

    questions_text = workspace.suggest(request.topic)
    if not questions_text:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=workspace.error)

    return SuggestResponse(
        questions_text=questions_text,
        count=count_questions(questions_text, batch_mode=True),
    )
