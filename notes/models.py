from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from vector_store.models import VectorMatch


class Note(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    created_at: Optional[str] = Field(None, alias="createdAt")


class NoteCreateRequest(BaseModel):
    # Blank values are rejected by the service so the 400 message is uniform.
    title: Optional[str] = None
    description: Optional[str] = None


class NoteSummary(BaseModel):
    id: str
    title: str
    description: str


class NoteCreateResponse(BaseModel):
    success: bool = True
    message: str = "Note saved successfully"
    note: NoteSummary


class ListedNote(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    score: float


class NoteListResponse(BaseModel):
    success: bool = True
    count: int
    notes: list[ListedNote] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Note deleted successfully"
    deleted_id: str = Field(..., alias="deletedId")


class SearchAnswer(BaseModel):
    query: str
    answer: str
    found_results: bool
    matches: list[VectorMatch] = Field(default_factory=list)


class HealthResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str
    endpoints: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    path: Optional[str] = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
