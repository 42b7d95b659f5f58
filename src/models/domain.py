from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class RecipeImportAttempt(Base):
    """One strategy execution; rows are only ever appended."""

    __tablename__ = "recipe_import_attempts"
    __table_args__ = (
        Index("idx_import_attempts_site_type", "site_type"),
        Index("idx_import_attempts_strategy", "strategy_used"),
        Index("idx_import_attempts_created_at", "created_at"),
        {'extend_existing': True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    site_type: Mapped[str] = mapped_column(String(50), nullable=False)
    parser_version: Mapped[str] = mapped_column(String(20), nullable=False)
    strategy_used: Mapped[str] = mapped_column(String(50), nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    html_pattern: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    confidence_score: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    ingredients_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    steps_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_html_sample: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class RecipeExtractionPattern(Base):
    """Success/failure counters per (site type, fingerprint, strategy, parser version)."""

    __tablename__ = "recipe_extraction_patterns"
    __table_args__ = (
        UniqueConstraint(
            "site_type",
            "html_pattern",
            "extraction_method",
            "parser_version",
            name="uq_extraction_pattern_key",
        ),
        Index("idx_extraction_patterns_lookup", "site_type", "html_pattern"),
        {'extend_existing': True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_type: Mapped[str] = mapped_column(String(50), nullable=False)
    html_pattern: Mapped[str] = mapped_column(String(255), nullable=False)
    extraction_method: Mapped[str] = mapped_column(String(50), nullable=False)
    parser_version: Mapped[str] = mapped_column(String(20), nullable=False)
    success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sample_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class DiscoveredRecipeSite(Base):
    """Hosts outside the known publisher list that served structured recipes."""

    __tablename__ = "discovered_recipe_sites"
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hostname: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    detection_method: Mapped[str] = mapped_column(String(20), nullable=False)
    discovery_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    first_discovered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
