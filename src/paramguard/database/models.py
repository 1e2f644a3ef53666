# src/paramguard/database/models.py

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, LargeBinary,
    CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship, declarative_base

# Create the base class for SQLAlchemy models
Base = declarative_base()


class ArchivedFile(Base):
    """A single archived snapshot of a configuration file."""
    __tablename__ = "archived_files"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    original_path = Column(String, nullable=False)
    format = Column(String, nullable=False)  # extension tag, e.g. 'json' or 'unknown'
    content_hash = Column(String(64), nullable=False)  # hex sha256 of the payload
    archive_timestamp = Column(DateTime, nullable=False)  # naive UTC
    retention_seconds = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    meta_info = Column("metadata", Text, nullable=True)  # serialized JSON document

    # Payload lives in its own table so listing never loads the blob
    payload = relationship(
        "ArchivedFileContent",
        back_populates="archive",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("name", "archive_timestamp", name="uq_archived_files_name_timestamp"),
        CheckConstraint("retention_seconds >= 0", name="ck_archived_files_retention_non_negative"),
        Index("ix_archived_files_archive_timestamp", "archive_timestamp"),
        {"sqlite_autoincrement": True},
    )


class ArchivedFileContent(Base):
    """Raw bytes of an archived file, stored apart from the indexed metadata."""
    __tablename__ = "archived_file_contents"

    archive_id = Column(Integer, ForeignKey("archived_files.id", ondelete="CASCADE"), primary_key=True)
    content = Column(LargeBinary, nullable=False)

    archive = relationship("ArchivedFile", back_populates="payload")
