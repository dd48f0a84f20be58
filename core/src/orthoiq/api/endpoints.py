"""
API Endpoints Configuration
Central registry of all available API endpoints
"""

from enum import Enum


class APIMethod(str, Enum):
    """HTTP methods for API endpoints."""
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"


class APIEndpoint:
    """Represents an API endpoint with metadata."""

    def __init__(
        self,
        path: str,
        method: APIMethod,
        description: str,
        tags: list[str] | None = None,
        admin_only: bool = False,
    ):
        self.path = path
        self.method = method
        self.description = description
        self.tags = tags or []
        self.admin_only = admin_only

    def __repr__(self) -> str:
        return f"{self.method.value} {self.path}"


# ============================================================================
# Rate Limit Endpoints
# ============================================================================

RATE_LIMIT_ENDPOINTS = {
    "status": APIEndpoint(
        path="/api/v1/rate-limits/status",
        method=APIMethod.GET,
        description="Remaining daily questions for an identifier, tier and platform",
        tags=["rate-limits", "status"],
    ),
    "reset": APIEndpoint(
        path="/api/v1/admin/rate-limits/reset",
        method=APIMethod.POST,
        description="Clear counters for one identifier or for everyone",
        tags=["rate-limits", "admin"],
        admin_only=True,
    ),
    "purge": APIEndpoint(
        path="/api/v1/admin/rate-limits/purge",
        method=APIMethod.POST,
        description="Delete counters from past days",
        tags=["rate-limits", "admin"],
        admin_only=True,
    ),
}

# ============================================================================
# Question Endpoints
# ============================================================================

QUESTION_ENDPOINTS = {
    "submit": APIEndpoint(
        path="/api/v1/questions",
        method=APIMethod.POST,
        description="Consume one daily slot and record the question",
        tags=["questions", "submit"],
    ),
}

# ============================================================================
# Consultation Endpoints
# ============================================================================

CONSULTATION_ENDPOINTS = {
    "create": APIEndpoint(
        path="/api/v1/consultations",
        method=APIMethod.POST,
        description="Register a consultation at the standard tier",
        tags=["consultations", "create"],
    ),
    "get": APIEndpoint(
        path="/api/v1/consultations/{consultation_id}",
        method=APIMethod.GET,
        description="Get a consultation with its tier and review fields",
        tags=["consultations", "get"],
    ),
    "specialists": APIEndpoint(
        path="/api/v1/consultations/{consultation_id}/specialists",
        method=APIMethod.PATCH,
        description="Record specialist count and consensus",
        tags=["consultations", "specialists"],
    ),
    "flag_for_review": APIEndpoint(
        path="/api/v1/consultations/{consultation_id}/flag-for-review",
        method=APIMethod.PATCH,
        description="Flag or unflag a consultation for MD review",
        tags=["consultations", "review"],
    ),
    "get_privacy": APIEndpoint(
        path="/api/v1/consultations/{consultation_id}/privacy",
        method=APIMethod.GET,
        description="Get a consultation's privacy setting",
        tags=["consultations", "privacy"],
    ),
    "update_privacy": APIEndpoint(
        path="/api/v1/consultations/{consultation_id}/privacy",
        method=APIMethod.PATCH,
        description="Owner-only privacy toggle",
        tags=["consultations", "privacy"],
    ),
}

# ============================================================================
# MD Review Endpoints
# ============================================================================

MD_REVIEW_ENDPOINTS = {
    "queue": APIEndpoint(
        path="/api/v1/admin/md-review/queue",
        method=APIMethod.GET,
        description="Consultations awaiting MD review",
        tags=["md-review", "queue"],
        admin_only=True,
    ),
    "detail": APIEndpoint(
        path="/api/v1/admin/md-review/{consultation_id}",
        method=APIMethod.GET,
        description="Consultation and milestone history for a reviewer",
        tags=["md-review", "detail"],
        admin_only=True,
    ),
    "submit": APIEndpoint(
        path="/api/v1/admin/md-review",
        method=APIMethod.POST,
        description="Submit an MD review and advance the consultation tier",
        tags=["md-review", "submit"],
        admin_only=True,
    ),
}

# ============================================================================
# Feedback Endpoints
# ============================================================================

FEEDBACK_ENDPOINTS = {
    "milestone": APIEndpoint(
        path="/api/v1/feedback/milestone",
        method=APIMethod.POST,
        description="Submit day 3/7/14/21/30 milestone feedback",
        tags=["feedback", "milestone"],
    ),
}

# ============================================================================
# Health & System Endpoints
# ============================================================================

SYSTEM_ENDPOINTS = {
    "health": APIEndpoint(
        path="/api/v1/health",
        method=APIMethod.GET,
        description="Health check endpoint",
        tags=["system", "health"],
    ),
    "ready": APIEndpoint(
        path="/api/v1/ready",
        method=APIMethod.GET,
        description="Database and Redis readiness",
        tags=["system", "ready"],
    ),
}

# ============================================================================
# All Endpoints Registry
# ============================================================================

ALL_ENDPOINTS = {
    "rate_limits": RATE_LIMIT_ENDPOINTS,
    "questions": QUESTION_ENDPOINTS,
    "consultations": CONSULTATION_ENDPOINTS,
    "md_review": MD_REVIEW_ENDPOINTS,
    "feedback": FEEDBACK_ENDPOINTS,
    "system": SYSTEM_ENDPOINTS,
}


def get_endpoint(category: str, name: str) -> APIEndpoint | None:
    """Get an endpoint by category and name."""
    return ALL_ENDPOINTS.get(category, {}).get(name)


def list_endpoints(category: str | None = None, admin_only: bool | None = None) -> list[APIEndpoint]:
    """List all endpoints, optionally filtered by category or admin requirement."""
    if category:
        result = list(ALL_ENDPOINTS.get(category, {}).values())
    else:
        result = [endpoint for endpoints in ALL_ENDPOINTS.values() for endpoint in endpoints.values()]

    if admin_only is not None:
        result = [endpoint for endpoint in result if endpoint.admin_only == admin_only]
    return result
