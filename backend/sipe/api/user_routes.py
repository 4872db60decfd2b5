# backend/sipe/api/user_routes.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sipe.api.deps_auth import TokenUser, get_db, require_admin, require_self_or_admin
from sipe.api.schemas import (
    DeletedUser,
    DeletedUserEnvelope,
    UserCreate,
    UserEnvelope,
    UserOut,
    UserUpdate,
)
from sipe.models.user import User
from sipe.services import accounts

router = APIRouter()


@router.get("", response_model=List[UserOut])
def list_users(
    db: Session = Depends(get_db),
    _admin: TokenUser = Depends(require_admin),
):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _user: TokenUser = Depends(require_self_or_admin),
):
    return accounts.get_user_or_404(db, user_id)


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _admin: TokenUser = Depends(require_admin),
):
    user = accounts.create_user(db, **payload.model_dump())
    return UserEnvelope(message="Usuario creado exitosamente", usuario=UserOut.model_validate(user))


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current: TokenUser = Depends(require_self_or_admin),
):
    user = accounts.get_user_or_404(db, user_id)
    user = accounts.update_user(
        db,
        user,
        payload.model_dump(exclude_unset=True),
        actor_is_admin=current.is_admin,
    )
    return UserEnvelope(message="Usuario actualizado exitosamente", usuario=UserOut.model_validate(user))


@router.delete("/{user_id}", response_model=DeletedUserEnvelope)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    _admin: TokenUser = Depends(require_admin),
):
    deleted = accounts.delete_user(db, user_id)
    return DeletedUserEnvelope(message="Usuario eliminado exitosamente", usuario=DeletedUser(**deleted))
