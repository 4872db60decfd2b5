# backend/sipe/api/equipment_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from sipe.api.deps_auth import TokenUser, get_db, get_token_user, require_admin
from sipe.api import schemas
from sipe.core.config import Settings, get_settings
from sipe.core.database import commit_or_conflict
from sipe.core.errors import ConflictError
from sipe.models.equipment import Equipment as EquipmentModel
from sipe.services import stock as stock_service

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_CODE = "Ya existe un equipo con ese número"

# ---------- READ (any authenticated user) ----------


@router.get("/estadisticas", response_model=schemas.Statistics)
def statistics(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _user: TokenUser = Depends(get_token_user),
):
    return schemas.Statistics(**stock_service.compute_statistics(db, settings.low_stock_threshold))


@router.get("", response_model=List[schemas.EquipmentOut])
def list_equipment(
    buscar: Optional[str] = None,
    stock_bajo: bool = Query(False, alias="stockBajo"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _user: TokenUser = Depends(get_token_user),
):
    q = db.query(EquipmentModel)

    term = (buscar or "").strip()
    if term:
        q = q.filter(
            or_(
                EquipmentModel.name.icontains(term, autoescape=True),
                EquipmentModel.code.icontains(term, autoescape=True),
                EquipmentModel.notes.icontains(term, autoescape=True),
            )
        )

    if stock_bajo:
        q = q.filter(EquipmentModel.stock < settings.low_stock_threshold)

    return q.order_by(EquipmentModel.last_updated.desc(), EquipmentModel.id.desc()).all()


@router.get("/{equipment_id}", response_model=schemas.EquipmentOut)
def get_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    _user: TokenUser = Depends(get_token_user),
):
    return stock_service.get_equipment_or_404(db, equipment_id)

# ---------- WRITE (admin only) ----------


@router.post("", response_model=schemas.EquipmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_equipment(
    payload: schemas.EquipmentCreate,
    db: Session = Depends(get_db),
    user: TokenUser = Depends(require_admin),
):
    item = EquipmentModel(**payload.model_dump(), last_updated=datetime.utcnow())

    db.add(item)
    commit_or_conflict(db, DUPLICATE_CODE)
    db.refresh(item)

    logger.info("Equipment created: %s by user %s", item.code, user.user_id)
    return schemas.EquipmentEnvelope(
        message="Equipo creado exitosamente",
        equipo=schemas.EquipmentOut.model_validate(item),
    )


@router.put("/{equipment_id}", response_model=schemas.EquipmentEnvelope)
def update_equipment(
    equipment_id: int,
    payload: schemas.EquipmentUpdate,
    db: Session = Depends(get_db),
    user: TokenUser = Depends(require_admin),
):
    item = stock_service.get_equipment_or_404(db, equipment_id)

    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is not None:
            setattr(item, k, v)
    item.last_updated = datetime.utcnow()

    commit_or_conflict(db, DUPLICATE_CODE)
    db.refresh(item)

    logger.info("Equipment updated: %s by user %s", item.code, user.user_id)
    return schemas.EquipmentEnvelope(
        message="Equipo actualizado exitosamente",
        equipo=schemas.EquipmentOut.model_validate(item),
    )


@router.delete("/{equipment_id}", response_model=schemas.DeletedEquipmentEnvelope)
def delete_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    user: TokenUser = Depends(require_admin),
):
    item = stock_service.get_equipment_or_404(db, equipment_id)
    deleted = schemas.DeletedEquipment(id=item.id, code=item.code, name=item.name)

    db.delete(item)
    db.commit()

    logger.info("Equipment deleted: %s by user %s", deleted.code, user.user_id)
    return schemas.DeletedEquipmentEnvelope(message="Equipo eliminado exitosamente", equipo=deleted)

# ---------- STOCK (any authenticated user) ----------


@router.patch("/{equipment_id}/stock", response_model=schemas.EquipmentEnvelope)
def set_stock(
    equipment_id: int,
    payload: schemas.StockSet,
    db: Session = Depends(get_db),
    _user: TokenUser = Depends(get_token_user),
):
    item = stock_service.adjust_stock(db, equipment_id, payload.stock)
    return schemas.EquipmentEnvelope(
        message="Stock actualizado exitosamente",
        equipo=schemas.EquipmentOut.model_validate(item),
    )


@router.post("/{equipment_id}/movimientos", response_model=schemas.StockMovementEnvelope)
def move_stock(
    equipment_id: int,
    payload: schemas.StockMove,
    db: Session = Depends(get_db),
    _user: TokenUser = Depends(get_token_user),
):
    movement = stock_service.move_stock(db, equipment_id, payload.quantity, payload.direction)
    label = "Entrada" if movement["direction"] == "in" else "Salida"
    return schemas.StockMovementEnvelope(
        message=f"{label} registrada exitosamente",
        movimiento=schemas.StockMovement(**movement),
    )


@router.post("/checkout", response_model=schemas.CheckoutOut)
def checkout(
    payload: schemas.CheckoutIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user: TokenUser = Depends(get_token_user),
):
    lines = [(line.equipment_id, line.quantity) for line in payload.items]
    try:
        result = stock_service.checkout(db, lines, settings.low_stock_threshold)
    except ConflictError as e:
        e.details = {
            "lines": [schemas.CheckoutLine(**r).model_dump(by_alias=True) for r in e.details["lines"]],
        }
        raise

    logger.info("Checkout by user %s: %d line(s)", user.user_id, len(lines))
    return schemas.CheckoutOut(
        message="Salida procesada exitosamente",
        lines=[schemas.CheckoutLine(**r) for r in result["lines"]],
        low_stock=[schemas.LowStockItem(**i) for i in result["low_stock"]],
    )
