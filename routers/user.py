from typing import Annotated

from fastapi import APIRouter, Depends

from deps.auth import optional_user, require_user
from schemas.users import AuthStatus, UserOut

router = APIRouter(tags=["user"])


@router.get("/api/me", response_model=UserOut)
def me(user: Annotated[UserOut, Depends(require_user)]):
    return user


@router.get("/auth/status", response_model=AuthStatus)
def auth_status(user: Annotated[UserOut | None, Depends(optional_user)]):
    return {"authenticated": user is not None, "user": user}
