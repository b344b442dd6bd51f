"""
Transport error classification.

Every caller that talks to the router (poller, refresh/import, outbound push,
connection test) funnels raw error text through :func:`classify`, so the same
message always lands in the same category.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from netwatch_manager.core.constants import ErrorCategory

# Evaluated top to bottom, first match wins
ERROR_RULES: Tuple[Tuple[Tuple[str, ...], ErrorCategory], ...] = (
    (("timeout", "timed out"), ErrorCategory.TIMEOUT),
    (("authentication", "login", "cannot log in"), ErrorCategory.AUTH_FAILURE),
    (("econnrefused", "connection refused"), ErrorCategory.CONNECTION_REFUSED),
    (("ehostunreach", "enetunreach"), ErrorCategory.NETWORK_UNREACHABLE),
)

ERROR_LABELS = {
    ErrorCategory.NOT_CONFIGURED: "MikroTik not configured",
    ErrorCategory.TIMEOUT: "Connection timeout",
    ErrorCategory.AUTH_FAILURE: "Authentication failed",
    ErrorCategory.CONNECTION_REFUSED: "Connection refused",
    ErrorCategory.NETWORK_UNREACHABLE: "Network unreachable",
    ErrorCategory.VALIDATION_ERROR: "Invalid request data",
    ErrorCategory.DUPLICATE_KEY: "Duplicate IP address",
    ErrorCategory.NOT_FOUND: "Not found",
    ErrorCategory.UNKNOWN: "Unexpected error",
}


@dataclass(frozen=True)
class ClassifiedError:
    category: ErrorCategory
    label: str
    details: str
    raw: str = ""

    def as_warning(self, prefix: str) -> str:
        return f"{prefix} ({self.category.value}): {self.details}"

    def result_fields(self) -> dict:
        """Keyword arguments for a failed OperationResult-style model."""
        return {
            "success": False,
            "category": self.category,
            "error": self.label,
            "details": self.details,
        }


def classify(raw_message: Optional[str]) -> ErrorCategory:
    """Map raw transport error text onto the fixed taxonomy."""
    text = (raw_message or "").lower()
    for keywords, category in ERROR_RULES:
        if any(keyword in text for keyword in keywords):
            return category
    return ErrorCategory.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCategory:
    return classify(str(exc) or exc.__class__.__name__)


def describe(
    category: ErrorCategory,
    raw_message: str = "",
    host: Optional[str] = None,
    port: Optional[int] = None,
    timeout: Optional[float] = None,
) -> ClassifiedError:
    """Build the operator-facing label and detail text for a classified failure."""
    target = f"{host}:{port}" if host and port else (host or "the router")
    if category is ErrorCategory.TIMEOUT:
        within = f" within {timeout:g} seconds" if timeout else ""
        details = f"Could not connect to MikroTik at {target}{within}. Please check network connectivity."
    elif category is ErrorCategory.AUTH_FAILURE:
        details = "Invalid MikroTik credentials. Please check username and password in System Settings."
    elif category is ErrorCategory.CONNECTION_REFUSED:
        details = f"Cannot reach MikroTik at {target}. Please verify IP address and port."
    elif category is ErrorCategory.NETWORK_UNREACHABLE:
        details = f"Cannot reach MikroTik at {host or target}. Please check network connectivity and firewall settings."
    elif category is ErrorCategory.NOT_CONFIGURED:
        details = "Please configure MikroTik connection in System Settings"
    else:
        details = raw_message or ERROR_LABELS[category]
    return ClassifiedError(category=category, label=ERROR_LABELS[category], details=details, raw=raw_message)


def classify_and_describe(exc: BaseException, **target) -> ClassifiedError:
    raw = str(exc) or exc.__class__.__name__
    return describe(classify(raw), raw, **target)
