from sipe.core.database import SessionLocal, engine, Base
from sipe.core.seed import reset_equipment, seed_users_if_empty
from sipe.models import equipment, user  # noqa: F401

# make sure tables exist
Base.metadata.create_all(bind=engine)

db = SessionLocal()
try:
    seed_users_if_empty(db)
    # wipe existing catalog (DEV ONLY)
    count = reset_equipment(db)
finally:
    db.close()

print(f"Database seeded with {count} equipment item(s)")
