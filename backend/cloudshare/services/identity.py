"""Identity provider: turns bearer credentials into a user id."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from jose import ExpiredSignatureError, JWTError, jwt

from cloudshare.services.errors import Unauthenticated

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def current_user(self, credentials: Optional[str]) -> str: ...


class JWTIdentityProvider:
    """Verifies HS256 bearer tokens whose ``sub`` claim is the user id.

    Token issuance belongs to the external auth service; ``issue_token`` exists
    for local development and tests.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        expire_dt = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=self.expire_minutes))
        claims = {"sub": str(user_id), "exp": int(expire_dt.timestamp())}
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def current_user(self, credentials: Optional[str]) -> str:
        if not credentials:
            raise Unauthenticated()
        try:
            payload = jwt.decode(
                credentials,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": True},
            )
        except ExpiredSignatureError:
            logger.info("Rejected expired bearer token")
            raise Unauthenticated("Token expired")
        except JWTError:
            logger.info("Rejected invalid bearer token")
            raise Unauthenticated("Invalid token")

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise Unauthenticated("Token has no subject")
        return user_id
