"""
Design Audit - AI Design Review Core

Extracts screens from Figma files and audits UI screenshots with a
vision model against a library of UX/UI heuristics, one screen or many
at a time.

Supports vision providers:
- Any OpenAI-compatible chat-completion gateway
- Anthropic Claude
"""

from .auditor import ScreenAuditor
from .dispatcher import ScreenAuditBoard, audit_screens, run_multi_screen_audit
from .figma import FigmaExporter, extract_frames, parse_figma_url
from .models import (
    AuditCategory,
    AuditConfig,
    AuditIssue,
    AuditResult,
    FigmaExtraction,
    FrameDescriptor,
    ImageInput,
    ScreenAuditResult,
)
from .sanitizer import parse_model_json
from .service import DesignAuditService

__version__ = "0.1.0"
__all__ = [
    "AuditCategory",
    "AuditConfig",
    "AuditIssue",
    "AuditResult",
    "DesignAuditService",
    "FigmaExporter",
    "FigmaExtraction",
    "FrameDescriptor",
    "ImageInput",
    "ScreenAuditBoard",
    "ScreenAuditResult",
    "ScreenAuditor",
    "audit_screens",
    "extract_frames",
    "parse_figma_url",
    "parse_model_json",
    "run_multi_screen_audit",
]
