from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import User

logger = logging.getLogger("updrill")


def _by_email(db: Session, email: str) -> Optional[User]:
    return db.scalars(select(User).where(User.email == email)).first()


def _link_provider(db: Session, user: User, provider: str, provider_id: str) -> User:
    linked = user.providers or []
    if any(p.get("provider") == provider for p in linked):
        return user
    # reassign so SQLAlchemy sees the JSON change
    user.providers = linked + [{"provider": provider, "provider_id": provider_id}]
    try:
        db.commit()
    except IntegrityError:
        # another request touched the row first; keep whatever it stored
        db.rollback()
        db.refresh(user)
        return user
    db.refresh(user)
    logger.info("linked provider %s to user %s", provider, user.id)
    return user


def find_or_create_user(
    db: Session,
    email: str,
    name: str,
    picture: Optional[str] = None,
    provider: Optional[str] = None,
    provider_id: Optional[str] = None,
) -> User:
    """
    Map a federated identity onto a local account, matched by email.
    A provider not yet linked to the account is appended to its providers.

    Two first requests for the same new email may both miss the lookup; the
    loser of the insert hits the unique email constraint and reads the
    winner's row instead.
    """
    email = email.strip().lower()
    user = _by_email(db, email)

    if user is None:
        user = User(
            email=email,
            name=(name or email).strip(),
            picture=picture,
            providers=[{"provider": provider, "provider_id": provider_id}]
            if provider and provider_id
            else [],
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            user = _by_email(db, email)
            if user is None:
                raise
        else:
            db.refresh(user)
            logger.info("created user %s via %s", user.id, provider or "gateway")
            return user

    if provider and provider_id:
        user = _link_provider(db, user, provider, provider_id)
    return user
