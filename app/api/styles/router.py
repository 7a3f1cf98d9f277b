from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies import get_workspace
from app.api.styles.schemas import (
    ActiveStyleRequest,
    ActiveStyleResponse,
    CustomStyleRequest,
    CustomStyleResponse,
    StyleListResponse,
    ThemeRequest,
    ThemeResponse,
)
from app.services.store import StyleNotFoundError, StyleValidationError
from app.services.workspace import AnswerWorkspace


router = APIRouter(prefix="/styles", tags=["styles"])


def _style_list(workspace: AnswerWorkspace) -> StyleListResponse:
    return StyleListResponse(
        active_style=workspace.active_style,
        available=workspace.available_styles(),
        custom_styles=[CustomStyleResponse.from_style(style) for style in workspace.custom_styles],
    )


@router.get("", response_model=StyleListResponse)
async def list_styles(workspace: AnswerWorkspace = Depends(get_workspace)) -> StyleListResponse:
    return _style_list(workspace)


@router.post("", response_model=CustomStyleResponse, status_code=status.HTTP_201_CREATED)
async def create_style(
    payload: CustomStyleRequest,
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> CustomStyleResponse:
    try:
        style = workspace.save_custom_style(payload.name, payload.instruction)
    except StyleValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return CustomStyleResponse.from_style(style)


@router.get("/active", response_model=ActiveStyleResponse)
async def get_active_style(workspace: AnswerWorkspace = Depends(get_workspace)) -> ActiveStyleResponse:
    return ActiveStyleResponse(active_style=workspace.active_style)


@router.put("/active", response_model=ActiveStyleResponse)
async def set_active_style(
    payload: ActiveStyleRequest,
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> ActiveStyleResponse:
    if payload.style not in workspace.available_styles():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown style {payload.style!r}")
    workspace.active_style = payload.style
    return ActiveStyleResponse(active_style=workspace.active_style)


@router.get("/theme", response_model=ThemeResponse)
async def get_theme(workspace: AnswerWorkspace = Depends(get_workspace)) -> ThemeResponse:
    return ThemeResponse(theme=workspace.theme)


@router.put("/theme", response_model=ThemeResponse)
async def set_theme(payload: ThemeRequest, workspace: AnswerWorkspace = Depends(get_workspace)) -> ThemeResponse:
    return ThemeResponse(theme=workspace.set_theme(payload.theme))


@router.put("/{style_id}", response_model=CustomStyleResponse)
async def update_style(
    style_id: str,
    payload: CustomStyleRequest,
    workspace: AnswerWorkspace = Depends(get_workspace),
) -> CustomStyleResponse:
    try:
        style = workspace.save_custom_style(payload.name, payload.instruction, style_id=style_id)
    except StyleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StyleValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return CustomStyleResponse.from_style(style)


@router.delete("/{style_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_style(style_id: str, workspace: AnswerWorkspace = Depends(get_workspace)) -> Response:
    try:
        workspace.delete_custom_style(style_id)
    except StyleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
