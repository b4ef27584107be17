"""
Plain-language advice attached to findings.

`remediation_for` is stored with each finding at build time.
`explain_impact` is only used when a report is displayed.
"""
from typing import Dict, Optional

from app.features.scan.schemas.scan import Impact

DEFAULT_REMEDIATION = (
    "Check the WCAG 2.1 guideline linked below for tips to make your content "
    "easier to use for everyone."
)

REMEDIATIONS: Dict[str, str] = {
    "color-contrast": (
        "Make text easier to read by increasing the color contrast (e.g., darker text "
        "on a light background, aiming for a 4.5:1 ratio)."
    ),
    "image-alt": (
        'Add clear alt text to images (e.g., alt="Person reading a book"). '
        "Keep it short and descriptive."
    ),
    "link-name": (
        'Use clear link text (e.g., "Read our guide" instead of "click here") to help '
        "users understand the link's purpose."
    ),
    "label": (
        'Add labels to form fields (e.g., <label for="name">Your Name</label>) and link '
        'them with the "for" attribute.'
    ),
    "heading-order": (
        "Organize headings logically (H1, then H2, then H3). Use only one H1 per page."
    ),
}

IMPACT_EXPLANATIONS: Dict[Impact, str] = {
    Impact.critical: "This makes it really hard for some people to use your site, like those using screen readers.",
    Impact.serious: "This causes big problems for users, like text that's hard to read.",
    Impact.moderate: "This might annoy some users, like tricky navigation.",
    Impact.minor: "This is a small issue but fixing it helps everyone.",
}

UNKNOWN_IMPACT_EXPLANATION = "Unknown issue level."


def remediation_for(rule_id: Optional[str]) -> str:
    return REMEDIATIONS.get(rule_id or "", DEFAULT_REMEDIATION)


def explain_impact(impact: Optional[Impact]) -> str:
    if impact is None:
        return UNKNOWN_IMPACT_EXPLANATION
    return IMPACT_EXPLANATIONS[impact]
