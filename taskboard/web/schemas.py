"""
Web API Schemas - Pydantic models for request/response
"""
from typing import Annotated, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from ..db.schema import SQLITE_MAX_INTEGER, UserRecord

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Row id as accepted from clients; larger values cannot be bound by SQLite
RecordId = Annotated[int, Field(ge=1, le=SQLITE_MAX_INTEGER)]


# ==================== Auth ====================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)
    password_confirmation: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    user: UserRecord
    token: str


class MessageResponse(BaseModel):
    message: str


# ==================== Tasks ====================

class TaskCreateRequest(BaseModel):
    """Create task request; completion accepts is_completed or isCompleted."""
    model_config = ConfigDict(populate_by_name=True)

    task_name: str = Field(..., alias="taskName", min_length=1)
    description: Optional[str] = None
    due_date: str = Field(..., alias="dueDate")
    is_completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_completed", "isCompleted"),
    )
    category_ids: List[RecordId] = Field(default_factory=list)


class TaskUpdateRequest(BaseModel):
    """Partial update request; only fields present in the body are applied."""
    model_config = ConfigDict(populate_by_name=True)

    task_name: Optional[str] = Field(default=None, alias="taskName")
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    is_completed: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("is_completed", "isCompleted"),
    )


# ==================== Categories / Comments ====================

class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)


class CommentCreateRequest(BaseModel):
    description: str = Field(..., min_length=1)
    task_id: RecordId
