"""Schemas for custom style and preference endpoints."""

from typing import List, Literal

from pydantic import BaseModel, Field

from app.services.store import CustomStyle


class CustomStyleRequest(BaseModel):
    name: str = Field(..., description="Style name shown in the style list")
    instruction: str = Field(..., description="Instruction appended to generation requests")


class CustomStyleResponse(BaseModel):
    id: str
    name: str
    instruction: str

    @classmethod
    def from_style(cls, style: CustomStyle) -> "CustomStyleResponse":
        return cls(**style.to_dict())


class StyleListResponse(BaseModel):
    active_style: str = Field(..., description="Style used for the next generation")
    available: List[str] = Field(..., description="Built-in style names followed by custom ones")
    custom_styles: List[CustomStyleResponse]


class ActiveStyleRequest(BaseModel):
    style: str = Field(..., min_length=1, description="Built-in or custom style name")


class ActiveStyleResponse(BaseModel):
    active_style: str


class ThemeRequest(BaseModel):
    theme: Literal["light", "dark"]


class ThemeResponse(BaseModel):
    theme: Literal["light", "dark"]
