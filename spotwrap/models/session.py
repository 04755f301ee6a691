"""Authorization status and the process-wide session record."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuthorizationStatus(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"


@dataclass
class Session:
    """Authorization state shared by every component.

    Only the authorization flow controller writes to it. csrf_state is the
    nonce sent with the last authorization request (None before the first
    login and after logout).
    """
    authorization_status: AuthorizationStatus = AuthorizationStatus.UNAUTHENTICATED
    is_retrieving_tokens: bool = False
    csrf_state: Optional[str] = None

    @property
    def is_authorized(self) -> bool:
        return self.authorization_status is AuthorizationStatus.AUTHORIZED

    def to_dict(self) -> dict:
        # csrf_state stays server-side
        return {
            "authorization_status": self.authorization_status.value,
            "is_authorized": self.is_authorized,
            "is_retrieving_tokens": self.is_retrieving_tokens,
        }
