"""
Scan Schemas

Request model for the scan endpoint, the raw axe-core result shapes, and the
stored Report returned to clients.
"""
import enum
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Request
# ============================================================================

class ScanIn(BaseModel):
    """Body of POST /scan. `url` is optional here so a missing value is a 400, not a 422."""
    url: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com"
            }
        }
    )


# ============================================================================
# axe-core output
# ============================================================================

class Impact(str, enum.Enum):
    critical = "critical"
    serious = "serious"
    moderate = "moderate"
    minor = "minor"


class RawFinding(BaseModel):
    """One axe-core rule result (violation, pass or inapplicable)."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    impact: Optional[Impact] = None
    description: str = ""
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    help: str = ""
    help_url: str = Field(default="", alias="helpUrl")
    tags: List[str] = Field(default_factory=list)


class AxeResults(BaseModel):
    model_config = ConfigDict(extra="ignore")

    violations: List[RawFinding] = Field(default_factory=list)
    passes: List[RawFinding] = Field(default_factory=list)
    inapplicable: List[RawFinding] = Field(default_factory=list)


# ============================================================================
# Report
# ============================================================================

class Finding(BaseModel):
    """A normalized violation as stored in a Report."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    impact: Optional[Impact] = None
    description: str
    nodes: int  # number of affected elements
    help: str
    help_url: str = Field(alias="helpUrl")
    remediation: str


class Report(BaseModel):
    """Result of one scan. Immutable once built."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "01932c1e-7f7a-7cc1-9d1f-3a5b8e0c2d11",
                "url": "https://example.com",
                "timestamp": "2026-10-19T09:30:00Z",
                "violations": 1,
                "passes": 17,
                "inapplicable": 5,
                "details": [
                    {
                        "id": "image-alt",
                        "impact": "serious",
                        "description": "Images must have alternate text",
                        "nodes": 1,
                        "help": "Images must have alternate text",
                        "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/image-alt",
                        "remediation": "Add clear alt text to images (e.g., alt=\"Person reading a book\"). Keep it short and descriptive.",
                    }
                ],
            }
        },
    )

    id: str
    url: str
    timestamp: datetime
    violations: int
    passes: int
    inapplicable: int
    details: Tuple[Finding, ...] = ()
