from pydantic import BaseModel
from typing import List, Optional


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    status: int
    details: Optional[List[ErrorDetail]] = None


class MessageResponse(BaseModel):
    message: str
