from datetime import datetime, timezone
from typing import Optional
from jose import JWTError, jwt


class Session:
    """
    Holds the signed-in admin's token and is handed to every data-fetching
    object explicitly instead of being read from global state.
    """

    def __init__(self, token: str, user: Optional[dict] = None):
        token = (token or "").strip()
        if token.startswith("Bearer "):
            token = token[7:]
        self.token = token
        self.user = user or {}

    @property
    def claims(self) -> dict:
        """
        JWT payload, read without signature verification. The backend is the
        one that verifies; the client only needs `_id` and `exp`.
        """
        if not self.token:
            return {}
        try:
            return jwt.get_unverified_claims(self.token)
        except JWTError:
            return {}

    @property
    def user_id(self) -> Optional[str]:
        claims = self.claims
        return claims.get("_id") or claims.get("sub") or self.user.get("_id")

    def is_expired(self, now: datetime = None) -> bool:
        exp = self.claims.get("exp")
        if exp is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now.timestamp() >= float(exp)

    def auth_headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
