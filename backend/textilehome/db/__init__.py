import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from textilehome.config import settings

log = logging.getLogger("textilehome.db")

DATABASE_URL = settings.DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # TestClient and the scheduler touch the same SQLite file from other threads
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# every module declaring tables must be listed so metadata is populated
MODEL_MODULES = [
    "textilehome.models.product",
    "textilehome.models.cart_item",
    "textilehome.models.admin",
]


def init_db(reset: bool = False, seed: bool = False):
    """
    Initialize DB schema.

    reset=True drops and recreates every table (tests, scripts/seed_products.py --reset).
    seed=True loads the sample catalogue when the products table is empty.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)

    if seed:
        from textilehome.seed import seed_products

        db = SessionLocal()
        try:
            created = seed_products(db)
            if created:
                log.info("Seeded %d sample products", created)
        finally:
            db.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
