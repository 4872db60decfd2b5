"""Stock arithmetic for the equipment catalog.

Every decrement is a single conditional UPDATE (``stock = stock - q WHERE
stock >= q``), so the new value is never computed from a copy the caller read
earlier and stock cannot go negative under concurrent writers.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from sipe.core.errors import ConflictError, NotFoundError, ValidationError
from sipe.models.equipment import Equipment

logger = logging.getLogger(__name__)

DIRECTIONS = ("in", "out")


def is_low_stock(stock: int, threshold: int) -> bool:
    """Low-stock notice rule: something left, but no more than the threshold."""
    return 0 < stock <= threshold


def get_equipment_or_404(db: Session, equipment_id: int) -> Equipment:
    item = db.get(Equipment, equipment_id)
    if not item:
        raise NotFoundError("Equipo no encontrado")
    return item


def adjust_stock(db: Session, equipment_id: int, new_value: Optional[int]) -> Equipment:
    if new_value is None or new_value < 0:
        raise ValidationError("Stock inválido")

    item = get_equipment_or_404(db, equipment_id)
    prev = item.stock
    item.stock = new_value
    item.last_updated = datetime.utcnow()
    db.commit()
    db.refresh(item)

    logger.info("Stock set for %s: %s -> %s", item.code, prev, item.stock)
    return item


def _apply_delta(db: Session, equipment_id: int, delta: int) -> Optional[int]:
    """Add ``delta`` to the row in place and return the stored result.

    Negative deltas only match when enough stock is left; ``None`` means no
    row was changed.
    """
    now = datetime.utcnow()
    stmt = (
        update(Equipment)
        .where(Equipment.id == equipment_id)
        .values(stock=Equipment.stock + delta, last_updated=now, updated_at=now)
        .returning(Equipment.stock)
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Equipment.stock >= -delta)
    return db.execute(stmt).scalar_one_or_none()


def _current_stock(db: Session, equipment_id: int) -> Optional[int]:
    return db.execute(select(Equipment.stock).where(Equipment.id == equipment_id)).scalar_one_or_none()


def move_stock(db: Session, equipment_id: int, quantity: Optional[int], direction: Optional[str]) -> dict:
    if not quantity or quantity <= 0 or direction not in DIRECTIONS:
        raise ValidationError('Cantidad y tipo son obligatorios; tipo debe ser "in" u "out"')

    delta = quantity if direction == "in" else -quantity

    new_stock = _apply_delta(db, equipment_id, delta)
    if new_stock is None:
        db.rollback()
        current = _current_stock(db, equipment_id)
        if current is None:
            raise NotFoundError("Equipo no encontrado")
        logger.info("Stock out rejected for equipment %s: requested %s, available %s", equipment_id, quantity, current)
        raise ValidationError("Stock insuficiente")

    db.commit()
    item = get_equipment_or_404(db, equipment_id)

    movement = {
        "id": item.id,
        "code": item.code,
        "name": item.name,
        "direction": direction,
        "quantity": quantity,
        "previous_stock": new_stock - delta,
        "current_stock": new_stock,
    }
    logger.info(
        "Stock %s for %s: %s -> %s",
        direction,
        movement["code"],
        movement["previous_stock"],
        movement["current_stock"],
    )
    return movement


def _checkout_line(db: Session, equipment_id: int, quantity: int) -> dict:
    line = {
        "equipment_id": equipment_id,
        "code": None,
        "name": None,
        "quantity": quantity,
        "previous_stock": None,
        "current_stock": None,
        "status": "ok",
    }

    new_stock = _apply_delta(db, equipment_id, -quantity)

    item = db.get(Equipment, equipment_id, populate_existing=True)
    if item is None:
        line["status"] = "not_found"
        return line

    line["code"] = item.code
    line["name"] = item.name

    if new_stock is None:
        line["status"] = "insufficient_stock"
        line["previous_stock"] = line["current_stock"] = item.stock
    else:
        line["previous_stock"] = new_stock + quantity
        line["current_stock"] = new_stock
    return line


def checkout(db: Session, lines: Iterable[Tuple[int, int]], threshold: int) -> dict:
    """Apply every cart line in one transaction, all or nothing.

    All lines are attempted so the caller gets an outcome per line; if any of
    them failed the transaction is rolled back and ``ConflictError`` carries
    the per-line report.
    """
    lines = list(lines)
    if not lines:
        raise ValidationError("El carrito está vacío")
    for _, quantity in lines:
        if quantity is None or quantity <= 0:
            raise ValidationError("La cantidad de cada línea debe ser mayor que cero")

    results = [_checkout_line(db, equipment_id, quantity) for equipment_id, quantity in lines]
    failed = [r for r in results if r["status"] != "ok"]

    if failed:
        db.rollback()
        # rolled back: report what is actually stored now
        for r in results:
            if r["status"] != "not_found":
                stored = _current_stock(db, r["equipment_id"])
                r["previous_stock"] = r["current_stock"] = stored
        logger.warning("Checkout rejected: %d of %d line(s) failed", len(failed), len(results))
        raise ConflictError("No se pudo procesar la salida", details={"lines": results})

    db.commit()

    low_stock: list[dict] = []
    seen: set[int] = set()
    # a repeated item reports its final value once
    for r in reversed(results):
        if r["equipment_id"] in seen:
            continue
        seen.add(r["equipment_id"])
        if is_low_stock(r["current_stock"], threshold):
            low_stock.append(
                {
                    "equipment_id": r["equipment_id"],
                    "code": r["code"],
                    "name": r["name"],
                    "stock": r["current_stock"],
                }
            )
    low_stock.reverse()

    logger.info("Checkout processed: %d line(s), %d low-stock item(s)", len(results), len(low_stock))
    return {"lines": results, "low_stock": low_stock}


def compute_statistics(db: Session, threshold: int) -> dict:
    total = db.query(func.count(Equipment.id)).scalar() or 0
    low = db.query(func.count(Equipment.id)).filter(Equipment.stock < threshold).scalar() or 0
    stock_total = db.query(func.coalesce(func.sum(Equipment.stock), 0)).scalar() or 0
    empty = db.query(func.count(Equipment.id)).filter(Equipment.stock == 0).scalar() or 0

    return {
        "total_equipment": int(total),
        "low_stock": int(low),
        "stock_total": int(stock_total),
        "out_of_stock": int(empty),
    }
