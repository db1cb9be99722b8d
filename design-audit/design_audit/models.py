"""
Data Models for Design Audit

Type-safe Pydantic models for all data structures.
Field names are snake_case in Python and camelCase on the wire
(``overallScore``, ``imageUrl``...); both spellings are accepted on input.
"""

import logging
from base64 import b64encode
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """Base model serialising to camelCase JSON"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with wire (camelCase) field names"""
        return self.model_dump(by_alias=True, mode="json")


# ──────────────────────────────────────────────
# Design file
# ──────────────────────────────────────────────

class FigmaFileHandle(WireModel):
    """
    Reference to a Figma file parsed from a share URL.

    Attributes:
        file_key: Opaque file identifier
        node_id: Optional pinned node, in API form ("1:2")
    """

    model_config = ConfigDict(frozen=True)

    file_key: str = Field(min_length=1)
    node_id: Optional[str] = None


class DesignNode(BaseModel):
    """One node of the Figma document tree (page, frame, layer...)"""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    type: str
    children: list["DesignNode"] = Field(default_factory=list)


class FrameDescriptor(WireModel):
    """
    A top-level exportable container found directly under a page.

    ``image_url`` stays None until the export step resolves a render.
    """

    id: str
    name: str
    node_id: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def default_node_id(self) -> "FrameDescriptor":
        if self.node_id is None:
            self.node_id = self.id
        return self


class FigmaExtraction(WireModel):
    """
    Result of the Figma export pipeline.

    Attributes:
        file_name: Document title
        file_key: Figma file key
        frames: Exported frames, document order, image URLs resolved
        total_frames: Frames found before the cap was applied
        exported_frames: len(frames)
        warnings: Partial-result notices (skipped batches, dropped frames)
    """

    file_name: str
    file_key: str
    frames: list[FrameDescriptor] = Field(default_factory=list)
    total_frames: int = Field(ge=0)
    exported_frames: int = Field(ge=0)
    warnings: list[str] = Field(default_factory=list)


# ──────────────────────────────────────────────
# Audit request
# ──────────────────────────────────────────────

class AuditConfig(WireModel):
    """Per-request context merged into the audit prompt"""

    fidelity: Literal["wireframe", "mvp", "high-fidelity"] = "high-fidelity"
    purpose: Literal["pre-handoff", "review", "portfolio", "stakeholder"] = "review"
    screen_name: Optional[str] = None


class ImageInput(BaseModel):
    """
    Image sent to the vision model: inline base64 or a remote URL.

    Exactly one of ``base64`` / ``url`` must be set.
    """

    model_config = ConfigDict(frozen=True)

    base64: Optional[str] = None
    url: Optional[str] = None
    media_type: str = "image/png"

    @model_validator(mode="after")
    def exactly_one_source(self) -> "ImageInput":
        if bool(self.base64) == bool(self.url):
            raise ValueError("Either base64 or url is required (not both)")
        return self

    @classmethod
    def from_path(cls, path: Path) -> "ImageInput":
        """Read and encode a local image file"""
        suffix = path.suffix.lower()
        media_type = "image/jpeg" if suffix in (".jpg", ".jpeg") else f"image/{suffix.lstrip('.') or 'png'}"
        with open(path, "rb") as f:
            data = b64encode(f.read()).decode("utf-8")
        return cls(base64=data, media_type=media_type)

    @property
    def is_remote(self) -> bool:
        return self.url is not None

    def as_url(self) -> str:
        """Data URL for inline images, the URL itself otherwise"""
        if self.url:
            return self.url
        return f"data:{self.media_type};base64,{self.base64}"


# ──────────────────────────────────────────────
# Audit result
# ──────────────────────────────────────────────

SEVERITIES = ("critical", "warning", "info")
SEVERITY_ALIASES = {"high": "critical", "medium": "warning", "low": "info"}
RISK_LEVELS = ("Low", "Medium", "High")


def _clamp_score(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"score must be a number, got {value!r}")
    return round(min(max(score, 0.0), 100.0), 1)


def _coordinate(value) -> Optional[float]:
    """Percentage coordinate; "40%" reads as 40, anything unreadable as None"""
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _keep_valid(model: type[BaseModel], items) -> list:
    """Validate list items one by one, dropping the ones that don't fit"""
    kept = []
    for item in items:
        try:
            kept.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping malformed %s: %s", model.__name__, e)
    return kept


class AuditIssue(WireModel):
    """
    One problem found by the vision model.

    x / y are percentage coordinates on the image as returned by the
    model; they are not bounds-checked. Unknown severities read as info.
    """

    id: str = ""
    rule_id: Optional[str] = None
    principle: Optional[str] = None
    title: str = ""
    description: str = ""
    severity: Literal["critical", "warning", "info"] = "info"
    category: str = ""
    suggestion: str = ""
    x: Optional[float] = None
    y: Optional[float] = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v):
        if not isinstance(v, str):
            return "info"
        v = v.strip().lower()
        v = SEVERITY_ALIASES.get(v, v)
        return v if v in SEVERITIES else "info"

    @field_validator("x", "y", mode="before")
    @classmethod
    def coerce_coordinate(cls, v):
        return _coordinate(v)


class AuditCategory(WireModel):
    """
    Issues grouped under one theme, scored by the model.

    A malformed issue is dropped on its own; the rest of the category stays.
    """

    name: str
    score: float = 0
    icon: str = ""
    issues: list[AuditIssue] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return _clamp_score(v)

    @field_validator("issues", mode="before")
    @classmethod
    def drop_malformed_issues(cls, v):
        if v is None:
            return []
        return _keep_valid(AuditIssue, v) if isinstance(v, list) else v


class AuditResult(WireModel):
    """
    Complete audit for one screen.

    ``overall_score`` and ``categories`` are required; everything below
    them is validated leniently so one odd field never costs the audit.
    A re-audit produces a new AuditResult; results are never merged.
    """

    overall_score: float
    summary: str = ""
    risk_level: Literal["Low", "Medium", "High"] = "Medium"
    categories: list[AuditCategory]

    @field_validator("overall_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return _clamp_score(v)

    @field_validator("risk_level", mode="before")
    @classmethod
    def normalize_risk(cls, v):
        v = v.strip().capitalize() if isinstance(v, str) else v
        return v if v in RISK_LEVELS else "Medium"

    @field_validator("categories", mode="before")
    @classmethod
    def drop_malformed_categories(cls, v):
        return _keep_valid(AuditCategory, v) if isinstance(v, list) else v

    @classmethod
    def fallback(cls, summary: Optional[str] = None) -> "AuditResult":
        """
        Neutral result used when the model output can't be recovered.

        Args:
            summary: Why the audit could not be completed (generic by default)
        """
        return cls(
            overall_score=0,
            summary=summary or "The AI analysis could not be completed for this screen. Please try again.",
            risk_level="High",
            categories=[],
        )

    @property
    def issues(self) -> list[AuditIssue]:
        return [issue for category in self.categories for issue in category.issues]

    @property
    def critical_issues(self) -> list[AuditIssue]:
        return [issue for issue in self.issues if issue.severity == "critical"]


class FunctionalityResult(WireModel):
    """Good / mixed / bad verdict on whether a screen lets users get things done"""

    verdict: Literal["good", "mixed", "bad"]
    score: float
    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        return _clamp_score(v)

    @field_validator("verdict", mode="before")
    @classmethod
    def normalize_verdict(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @classmethod
    def fallback(cls) -> "FunctionalityResult":
        return cls(
            verdict="mixed",
            score=50,
            summary="Analysis could not be completed. Please try again.",
        )


class ScreenAuditResult(WireModel):
    """
    Per-screen slot of a multi-screen run.

    Created pending (``is_loading=True``); settles exactly once, either
    with a result or with an error message.
    """

    model_config = ConfigDict(frozen=True)

    screen_name: str
    screen_image_url: Optional[str] = None
    result: Optional[AuditResult] = None
    is_loading: bool = True
    error: Optional[str] = None

    @classmethod
    def pending(cls, frame: FrameDescriptor) -> "ScreenAuditResult":
        return cls(screen_name=frame.name, screen_image_url=frame.image_url)

    @classmethod
    def settled(cls, frame: FrameDescriptor, result: AuditResult) -> "ScreenAuditResult":
        return cls(
            screen_name=frame.name,
            screen_image_url=frame.image_url,
            result=result,
            is_loading=False,
        )

    @classmethod
    def failed(cls, frame: FrameDescriptor, message: str) -> "ScreenAuditResult":
        return cls(
            screen_name=frame.name,
            screen_image_url=frame.image_url,
            is_loading=False,
            error=message,
        )


# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────

class Config(BaseModel):
    """
    Configuration for the design audit core.

    Loaded from .env file and environment variables by ``load_config``
    and injected into each component.

    Attributes:
        figma_access_token: Personal access token for the Figma REST API
        figma_api_base: Figma REST API root
        figma_max_frames: Cap on frames exported per file
        figma_file_depth: Tree depth requested for the file fetch
        figma_export_scale: Render scale for image export
        figma_batch_size: Frames per export batch in the fallback path
        figma_batch_delay: Seconds between export batches
        figma_export_delay: Seconds to wait between file fetch and export
        figma_max_retries: Rate-limit retries per Figma request
        figma_backoff_base: Base delay (seconds) for exponential backoff
        vision_provider: Which vision provider to use
        vision_api_key: Key for the OpenAI-compatible gateway
        vision_base_url: Gateway base URL (None = OpenAI)
        vision_model: Model requested from the gateway
        anthropic_api_key: Anthropic API key (optional)
        anthropic_model: Claude model for the anthropic provider
        audit_concurrency: Worker count for multi-screen audits
    """

    figma_access_token: Optional[str] = None
    figma_api_base: str = "https://api.figma.com/v1"
    figma_max_frames: int = Field(default=10, ge=1, le=50)
    figma_file_depth: int = Field(default=2, ge=1)
    figma_export_scale: float = Field(default=1, gt=0, le=4)
    figma_batch_size: int = Field(default=3, ge=1)
    figma_batch_delay: float = Field(default=2.0, ge=0)
    figma_export_delay: float = Field(default=1.0, ge=0)
    figma_max_retries: int = Field(default=4, ge=0)
    figma_backoff_base: float = Field(default=3.0, ge=0)
    vision_provider: Literal["gateway", "anthropic"] = "gateway"
    vision_api_key: Optional[str] = None
    vision_base_url: Optional[str] = None
    vision_model: str = "google/gemini-2.5-flash"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    audit_concurrency: int = Field(default=3, ge=1)

    def has_figma(self) -> bool:
        """Check if a Figma token is configured"""
        return self.figma_access_token is not None and len(self.figma_access_token) > 0

    def has_gateway(self) -> bool:
        """Check if the chat-completion gateway is configured"""
        return self.vision_api_key is not None and len(self.vision_api_key) > 0

    def has_anthropic(self) -> bool:
        """Check if Anthropic is configured"""
        return self.anthropic_api_key is not None and len(self.anthropic_api_key) > 0
