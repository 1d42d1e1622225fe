"""Pydantic models for service categories."""

from typing import List

from pydantic import BaseModel, Field


class CategoryRead(BaseModel):
    id: int
    name: str = Field(..., examples=["Molinetes"])

    model_config = {
        "from_attributes": True,
    }


class CategoryListResponse(BaseModel):
    message: str = "success"
    data: List[CategoryRead]
