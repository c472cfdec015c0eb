from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Session:
    """Who is looking at the page.

    Passed explicitly to page handlers; the engine in ``core`` never sees it.
    The token is opaque here: it is neither validated nor forwarded.
    """

    token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)


def get_session(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Session:
    if credentials is None or not credentials.credentials.strip():
        return Session()
    return Session(token=credentials.credentials.strip())


def require_session(session: Session = Depends(get_session)) -> Session:
    if not session.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
