"""
Data models for recipe extraction.

This module contains the enums and frozen result types passed between the
carrier readers, site parsers, strategies and the strategy selector.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple


class SiteType(str, enum.Enum):
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    RECIPE_SITE = "recipe-site"
    GENERIC = "generic"


class StrategyName(str, enum.Enum):
    EMBEDDED_STATE = "embedded-state"
    FRAMEWORK_DATA = "framework-data"
    STRUCTURED_DATA = "structured-data"
    META_TAGS = "meta-tags"
    SANDBOX_DOM = "sandbox-dom"
    OCR_SCREENSHOT = "ocr-screenshot"
    OEMBED = "oembed"


class Confidence(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


CONFIDENCE_SCORES = {
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


@dataclass(frozen=True)
class CarrierReading:
    """Caption and annotations pulled from one surface of a page."""
    caption: str = ""
    annotations: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.caption.strip() and not self.annotations


@dataclass(frozen=True)
class SourceCandidate:
    """A scored carrier reading; lives only for one extraction call."""
    key: str
    caption: str
    annotations: Tuple[str, ...]
    raw_length: int
    score: float

    @property
    def text(self) -> str:
        return "\n\n".join(part for part in (self.caption, *self.annotations) if part)


@dataclass(frozen=True)
class ParsedRecipe:
    """Structured recipe fields read by a site parser."""
    title: Optional[str]
    ingredients: Tuple[str, ...] = ()
    steps: Tuple[str, ...] = ()
    image: Optional[str] = None
    source: str = "jsonld"

    @property
    def has_recipe_data(self) -> bool:
        return bool(self.ingredients) or bool(self.steps)


@dataclass(frozen=True)
class ExtractionResult:
    success: bool
    strategy_used: StrategyName
    confidence: Confidence = Confidence.LOW
    title: Optional[str] = None
    ingredients: Tuple[str, ...] = ()
    steps: Tuple[str, ...] = ()
    image: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, strategy: StrategyName, error: str) -> "ExtractionResult":
        return cls(success=False, strategy_used=strategy, confidence=Confidence.LOW, error=error)

    def attributed_to(self, strategy: StrategyName) -> "ExtractionResult":
        if self.strategy_used == strategy:
            return self
        return replace(self, strategy_used=strategy)


@dataclass(frozen=True)
class ParserConfig:
    version: str
    strategies: Tuple[StrategyName, ...]
    rollout_percentage: int = 100
    enabled: bool = True


@dataclass(frozen=True)
class ExtractionAttempt:
    """One strategy execution, as handed to the pattern store."""
    url: str
    site_type: SiteType
    parser_version: str
    strategy_used: StrategyName
    success: bool
    html_pattern: str
    confidence: Optional[Confidence] = None
    ingredients_count: Optional[int] = None
    steps_count: Optional[int] = None
    error_message: Optional[str] = None
    raw_html_sample: Optional[str] = None


@dataclass(frozen=True)
class ImportOutcome:
    """Result of a full import plus the context it ran under."""
    url: str
    site_type: SiteType
    parser_version: str
    html_pattern: str
    result: ExtractionResult
    tried: Tuple[StrategyName, ...] = field(default_factory=tuple)
