# backend/sipe/api/auth_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from sipe.api.deps_auth import TokenUser, get_db, get_optional_token_user, get_token_user
from sipe.api.schemas import LoginIn, LoginOut, TokenOut, UserCreate, UserEnvelope, UserOut
from sipe.core.security import create_access_token
from sipe.services.accounts import authenticate, create_user, get_user_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/registro", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    current: Optional[TokenUser] = Depends(get_optional_token_user),
):
    data = payload.model_dump()
    # only an admin may pick the role of a new account
    if data.get("role") and not (current and current.is_admin):
        logger.info("Ignoring role %r requested on public registration of %s", data["role"], data["email"])
        data["role"] = None
    user = create_user(db, **data)
    return UserEnvelope(message="Usuario registrado exitosamente", usuario=UserOut.model_validate(user))


# JSON login used by the web client
@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    token = create_access_token(user.id, user.role)

    return LoginOut(token=token, usuario=UserOut.model_validate(user))


# OAuth2 form endpoint (Swagger Authorize uses this); "username" carries the email
@router.post("/token", response_model=TokenOut)
def token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    email = (form_data.username or "").strip().lower()
    user = authenticate(db, email, form_data.password or "")

    return TokenOut(
        access_token=create_access_token(user.id, user.role),
        usuario=UserOut.model_validate(user),
    )


@router.get("/verificar", response_model=UserEnvelope, response_model_exclude_none=True)
def verify(current: TokenUser = Depends(get_token_user), db: Session = Depends(get_db)):
    user = get_user_or_404(db, current.user_id)
    return UserEnvelope(usuario=UserOut.model_validate(user))
