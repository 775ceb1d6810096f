from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from mdfury.database.database_factory import Base
from mdfury.core.utils import create_random_key, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    fp = Column(String, unique=True, index=True, nullable=False,
                default=lambda: f"user_{create_random_key()}")
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)  # OAuth-created accounts have none
    display_name = Column(String)
    api_token = Column(String, unique=True, index=True, nullable=True)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    documents = relationship("Document", back_populates="owner",
                             cascade="all, delete-orphan")


class Document(Base):
    """A saved markdown bin.

    ``password`` is a shared secret stored as given; a document carrying one
    is always public (see ``mdfury.core.services.document_guard``).
    """
    __tablename__ = "documents"

    id = Column(String, primary_key=True, index=True,
                default=lambda: create_random_key(25))
    bin_id = Column(String(128), unique=True, index=True, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # null for anonymous bins
    title = Column(String, nullable=False, default="Untitled Document")
    content = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    is_public = Column(Boolean, nullable=False, default=True)
    password = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    owner = relationship("User", back_populates="documents")

    def __repr__(self):
        return f"<Document(id='{self.id}', bin_id='{self.bin_id}', is_public={self.is_public})>"
