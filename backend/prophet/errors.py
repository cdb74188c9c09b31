"""
Prophet Exception Hierarchy

Every error that reaches a caller carries a machine-readable code and the
HTTP status it maps to.

Exception Classes:
- ProphetError: Base exception
- ValidationFailed: Field-level validation errors (400)
- AuthorizationError: Caller may not perform the action (401/403)
- StateError: Bet/appeal lifecycle violation (400/409)
- NotFoundError: Referenced resource does not exist (404)
- UpstreamError: Judgment service or storage failure (5xx)
"""

from typing import Optional


class ProphetError(Exception):
    """Base exception for all Prophet errors."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


# ============================================================================
# Validation
# ============================================================================


class ValidationFailed(ProphetError):
    """One or more fields failed validation."""

    code = "VALIDATION_FAILED"
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__()
        self.errors = errors

    def to_dict(self) -> dict:
        return {"error": self.message, "validation_errors": self.errors}


class StakeBelowMinimum(ProphetError):
    code = "STAKE_BELOW_MINIMUM"
    status_code = 400
    default_message = "Stake is below the bet's minimum stake"


# ============================================================================
# Authorization
# ============================================================================


class AuthorizationError(ProphetError):
    code = "ACCESS_DENIED"
    status_code = 403
    default_message = "Access denied"


class AuthenticationRequired(AuthorizationError):
    code = "AUTHENTICATION_REQUIRED"
    status_code = 401
    default_message = "Authentication required"


class NotAuthorizedToResolve(AuthorizationError):
    code = "UNAUTHORIZED_RESOLUTION"
    default_message = "You are not authorized to resolve this bet"


class AIResolutionRequired(AuthorizationError):
    code = "AI_RESOLUTION_REQUIRED"
    default_message = "AI bets must be resolved through the AI arbitrator system"


class NotParticipant(AuthorizationError):
    code = "NOT_PARTICIPANT"
    default_message = "You did not participate in this bet"


class InsufficientPermissions(AuthorizationError):
    code = "INSUFFICIENT_PERMISSIONS"
    default_message = "Insufficient permissions"


# ============================================================================
# State
# ============================================================================


class StateError(ProphetError):
    code = "INVALID_STATE"
    status_code = 400
    default_message = "Operation not allowed in the current state"


class AlreadyResolved(StateError):
    code = "ALREADY_RESOLVED"
    default_message = "Bet is already resolved"


class DeadlineNotReached(StateError):
    code = "DEADLINE_NOT_REACHED"
    default_message = "Cannot resolve bet before deadline"


class DeadlinePassed(StateError):
    code = "DEADLINE_PASSED"
    default_message = "Bet deadline has passed"


class BetResolved(StateError):
    code = "BET_RESOLVED"
    default_message = "Bet is already resolved"


class AlreadyParticipated(StateError):
    code = "ALREADY_PARTICIPATED"
    default_message = "You have already placed a bet on this market"


class InsufficientCredits(StateError):
    code = "INSUFFICIENT_CREDITS"
    default_message = "Insufficient credits to place this bet"


class BetNotResolved(StateError):
    code = "BET_NOT_RESOLVED"
    default_message = "Cannot appeal a bet that has not been resolved yet"


class NotAIArbitrated(StateError):
    code = "NOT_AI_ARBITRATED"
    default_message = "Only AI-arbitrated bets can be appealed"


class AlreadyAppealed(StateError):
    code = "ALREADY_APPEALED"
    default_message = "You have already appealed this bet"


class AppealWindowExpired(StateError):
    code = "APPEAL_WINDOW_EXPIRED"
    default_message = "Appeal deadline has passed (7 days after resolution)"


class MarketExists(StateError):
    code = "MARKET_EXISTS"
    status_code = 409
    default_message = "A market with this name already exists"


# ============================================================================
# Resources
# ============================================================================


class NotFoundError(ProphetError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class BetNotFound(NotFoundError):
    code = "BET_NOT_FOUND"
    default_message = "Bet not found"


class MarketNotFound(NotFoundError):
    code = "MARKET_NOT_FOUND"
    default_message = "Market not found"


# ============================================================================
# Upstream
# ============================================================================


class UpstreamError(ProphetError):
    code = "UPSTREAM_ERROR"
    status_code = 502
    default_message = "Upstream service failed"


class JudgmentUnavailable(UpstreamError):
    code = "JUDGMENT_UNAVAILABLE"
    status_code = 503
    default_message = "AI arbitrator is unavailable, try again later"
