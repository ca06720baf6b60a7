"""Request identity.

Sessions and credentials are handled by the auth gateway in front of this
service; it forwards the authenticated user id in the X-User-Id header.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from injoyplan.db.models import User, UserRole
from injoyplan.db.session import get_db


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Id of the authenticated caller, or None for anonymous requests."""
    return x_user_id or None


def require_user(
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """The authenticated caller; 401 when anonymous or unknown."""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user"
        )
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    """The authenticated caller, who must be an administrator."""
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return user
