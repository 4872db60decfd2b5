# backend/sipe/api/schemas.py

import re
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")

Role = Literal["admin", "user"]


# ---------- USERS ----------

def _clean_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < 3:
        raise ValueError("El username debe tener al menos 3 caracteres")
    return v


def _clean_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if not EMAIL_RE.match(v):
        raise ValueError("Por favor ingresa un email válido")
    return v


def _check_password(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) < 6:
        raise ValueError("La contraseña debe tener al menos 6 caracteres")
    return v


class UserCreate(BaseModel):
    username: str
    email: str
    password: str
    role: Optional[Role] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v):
        return _clean_username(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _clean_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class UserUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v):
        return _clean_username(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _clean_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class UserOut(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class UserEnvelope(BaseModel):
    message: Optional[str] = None
    usuario: UserOut


class DeletedUser(BaseModel):
    id: int
    username: str
    email: str


class DeletedUserEnvelope(BaseModel):
    message: str
    usuario: DeletedUser


# ---------- AUTH ----------

class LoginIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginOut(BaseModel):
    message: str = "Login exitoso"
    token: str
    usuario: UserOut


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    usuario: UserOut


# ---------- EQUIPMENT ----------

def _required_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("no puede estar vacío")
    return v


class EquipmentBase(BaseModel):
    @field_validator("code", check_fields=False)
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        v = _required_text(v)
        return v.upper() if v is not None else v

    @field_validator("name", check_fields=False)
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v)

    @field_validator("notes", check_fields=False)
    @classmethod
    def normalize_notes(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    class Config:
        populate_by_name = True


class EquipmentCreate(EquipmentBase):
    code: str
    name: str
    purchase_date: date = Field(alias="purchaseDate")
    stock: int = Field(default=0, ge=0)
    notes: str = ""


class EquipmentUpdate(EquipmentBase):
    code: Optional[str] = None
    name: Optional[str] = None
    purchase_date: Optional[date] = Field(default=None, alias="purchaseDate")
    stock: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class EquipmentOut(BaseModel):
    id: int
    code: str
    name: str
    purchase_date: date = Field(alias="purchaseDate")
    stock: int
    notes: str = ""

    # DB returns datetime; keep datetime to avoid ResponseValidationError
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class EquipmentEnvelope(BaseModel):
    message: str
    equipo: EquipmentOut


class DeletedEquipment(BaseModel):
    id: int
    code: str
    name: str


class DeletedEquipmentEnvelope(BaseModel):
    message: str
    equipo: DeletedEquipment


class StockSet(BaseModel):
    # left optional so a missing value reports "Stock inválido" like a negative one
    stock: Optional[int] = None


class StockMove(BaseModel):
    quantity: Optional[int] = None
    direction: Optional[str] = None


class StockMovement(BaseModel):
    id: int
    code: str
    name: str
    direction: Literal["in", "out"]
    quantity: int
    previous_stock: int = Field(alias="previousStock")
    current_stock: int = Field(alias="currentStock")

    class Config:
        populate_by_name = True


class StockMovementEnvelope(BaseModel):
    message: str
    movimiento: StockMovement


class Statistics(BaseModel):
    total_equipment: int = Field(alias="totalEquipos")
    low_stock: int = Field(alias="equiposStockBajo")
    stock_total: int = Field(alias="stockTotal")
    out_of_stock: int = Field(alias="equiposSinStock")

    class Config:
        populate_by_name = True


# ---------- CHECKOUT ----------

class CartLine(BaseModel):
    equipment_id: int = Field(alias="equipmentId")
    quantity: int

    class Config:
        populate_by_name = True


class CheckoutIn(BaseModel):
    items: List[CartLine]


class CheckoutLine(BaseModel):
    equipment_id: int = Field(alias="equipmentId")
    code: Optional[str] = None
    name: Optional[str] = None
    quantity: int
    previous_stock: Optional[int] = Field(default=None, alias="previousStock")
    current_stock: Optional[int] = Field(default=None, alias="currentStock")
    status: Literal["ok", "not_found", "insufficient_stock"]

    class Config:
        populate_by_name = True


class LowStockItem(BaseModel):
    equipment_id: int = Field(alias="equipmentId")
    code: str
    name: str
    stock: int

    class Config:
        populate_by_name = True


class CheckoutOut(BaseModel):
    message: str
    lines: List[CheckoutLine]
    low_stock: List[LowStockItem] = Field(alias="lowStock")

    class Config:
        populate_by_name = True
