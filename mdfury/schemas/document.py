from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class DocumentCreateRequest(BaseModel):
    title: str = Field(default="", description="Document title; blank becomes 'Untitled Document'")
    content: str = Field(..., description="Markdown source")
    tags: List[str] = Field(default_factory=list)
    is_public: Optional[bool] = Field(default=None, description="Defaults to public")
    is_private: Optional[bool] = Field(default=None, description="Legacy inverse of is_public")
    bin_id: Optional[str] = Field(default=None, description="Custom bin id, generated when omitted")
    password: Optional[str] = Field(default=None, description="Viewing password; forces the document public")


class DocumentUpdateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None
    bin_id: Optional[str] = None
    password: Optional[str] = Field(default=None, description="Empty string removes the password")


class DocumentResponse(BaseModel):
    """Owner view, including the viewing password"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    bin_id: str
    owner_id: Optional[int] = None
    title: str
    content: str
    tags: List[str]
    is_public: bool
    password: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PublicDocumentResponse(BaseModel):
    """What a viewer of a shared bin gets back"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    bin_id: str
    owner_id: Optional[int] = None
    title: str
    content: str
    tags: List[str]
    is_public: bool
    has_password: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document) -> "PublicDocumentResponse":
        response = cls.model_validate(document)
        response.has_password = bool(document.password)
        return response


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total_count: int
