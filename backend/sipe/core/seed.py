import logging
from datetime import date

from sqlalchemy.orm import Session

from sipe.core.security import hash_password
from sipe.models.equipment import Equipment
from sipe.models.user import User, ROLE_ADMIN, ROLE_USER

logger = logging.getLogger(__name__)

# Change these creds anytime (dev defaults)
DEFAULT_USERS = [
    {"username": "admin", "email": "admin@sipe.local", "role": ROLE_ADMIN, "password": "admin123"},
    {"username": "usuario", "email": "usuario@sipe.local", "role": ROLE_USER, "password": "usuario123"},
]

SAMPLE_EQUIPMENT = [
    {"code": "EQ-001", "name": "Laptop Dell Latitude", "purchase_date": date(2024, 3, 12), "stock": 25},
    {"code": "EQ-002", "name": "Monitor 24\"", "purchase_date": date(2024, 5, 2), "stock": 8},
    {"code": "EQ-003", "name": "Proyector Epson", "purchase_date": date(2023, 11, 20), "stock": 3,
     "notes": "Revisar lámpara"},
    {"code": "EQ-004", "name": "Teclado inalámbrico", "purchase_date": date(2024, 1, 15), "stock": 0},
]


def seed_users_if_empty(db: Session) -> None:
    existing = db.query(User).count()
    if existing > 0:
        return

    db.add_all(
        [
            User(
                username=u["username"],
                email=u["email"],
                role=u["role"],
                password_hash=hash_password(u["password"]),
            )
            for u in DEFAULT_USERS
        ]
    )
    db.commit()
    logger.info("Seeded default users: %s", ", ".join(u["username"] for u in DEFAULT_USERS))


def reset_equipment(db: Session) -> int:
    """Replace the whole catalog with the sample items (DEV ONLY)."""
    db.query(Equipment).delete()
    db.add_all([Equipment(**item) for item in SAMPLE_EQUIPMENT])
    db.commit()
    return len(SAMPLE_EQUIPMENT)
