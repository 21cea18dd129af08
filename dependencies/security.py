from typing import Optional, Annotated
from fastapi import Depends, Header
from sqlalchemy.orm import Session
import hmac

from database.db import get_db
from models.teachers import Teacher
from services.errors import AuthenticationError

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def require_teacher(authorization: AuthHeader = None, db: Session = Depends(get_db)) -> Teacher:
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    # "Bearer <token>"
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise AuthenticationError("Invalid Authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid auth scheme")

    token = token.strip()
    teacher = db.query(Teacher).filter(Teacher.api_token == token).first() if token else None

    # timing-safe compare on the stored value
    if teacher is None or not hmac.compare_digest(token, teacher.api_token or ""):
        raise AuthenticationError("Invalid token")

    return teacher
