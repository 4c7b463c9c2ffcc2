"""Canned debate payloads served when the generation API is rate limited."""

import copy
from typing import Any

DEMO_RAW = {"demo": True, "message": "Rate limited - using demo response"}

_CANNED: dict[str, dict[str, Any]] = {
    "What is the Basic Structure Doctrine?": {
        "stance": (
            "The Basic Structure Doctrine, established in Kesavananda Bharati v. State of Kerala (1973), "
            "limits Parliament's power to amend the Constitution. While Article 368 allows amendments, the "
            "Court ruled that Parliament cannot alter the Constitution's 'basic structure', encompassing "
            "elements like constitutional supremacy, democratic governance, secularism, separation of "
            "powers, federalism, and fundamental rights."
        ),
        "counterStance": (
            "The exact components of the 'basic structure' remain subject to judicial interpretation, "
            "leading to ongoing controversy about the extent of Parliament's amending power and the "
            "tension between parliamentary sovereignty and judicial review."
        ),
        "citations": [
            {
                "id": "KesavanandaBharati",
                "source": "Kesavananda Bharati v. State of Kerala (1973)",
                "snippet": (
                    "While Parliament has the power to amend the Constitution under Article 368, it cannot "
                    "alter the 'basic structure' or fundamental features of the Constitution."
                ),
            }
        ],
        "quiz": [
            {
                "q": "Which landmark Supreme Court case established the Basic Structure Doctrine?",
                "options": [
                    "Kesavananda Bharati v. State of Kerala",
                    "Golak Nath v. State of Punjab",
                    "Minerva Mills v. Union of India",
                ],
                "answerIndex": 0,
            }
        ],
    },
    "How does the Indian Constitution define Money Bills?": {
        "stance": (
            "Article 110 defines Money Bills as bills containing only provisions on taxation, government "
            "borrowing, custody of and appropriation from the Consolidated Fund, and related matters."
        ),
        "counterStance": (
            "The Speaker's final say on what counts as a Money Bill has been criticised for allowing "
            "important legislation to bypass scrutiny by the Rajya Sabha."
        ),
        "citations": [
            {
                "id": "article110",
                "source": "Constitution of India",
                "snippet": (
                    "A Bill is deemed to be a Money Bill if it contains only provisions dealing with the "
                    "imposition, abolition, remission, alteration or regulation of any tax."
                ),
            }
        ],
        "quiz": [
            {
                "q": "Which article of the Indian Constitution defines Money Bills?",
                "options": ["Article 110", "Article 112", "Article 114", "Article 116"],
                "answerIndex": 0,
            }
        ],
    },
}

_GENERIC: dict[str, Any] = {
    "stance": (
        "This is a demo response. The AI service is currently rate limited. "
        "Please try again later or contact support for API access."
    ),
    "counterStance": (
        "In a live response this would contain the opposing viewpoint generated by the model "
        "from the retrieved constitutional sources."
    ),
    "citations": [
        {
            "id": "demo",
            "source": "Demo Mode",
            "snippet": "This is a placeholder citation. Real citations come from the constitutional corpus.",
        }
    ],
    "quiz": [
        {
            "q": "This is a demo quiz question. Real questions are generated by the model.",
            "options": ["Option A", "Option B", "Option C", "Option D"],
            "answerIndex": 0,
        }
    ],
}


def fallback_payload(query: str | None) -> dict[str, Any]:
    """Canned payload for the literal query text, else the generic demo payload."""
    payload = _CANNED.get(query or "", _GENERIC)
    return copy.deepcopy(payload)
