# hyroxbox/db/session.py
from __future__ import annotations

import logging

from sqlmodel import Session, SQLModel, create_engine, select

from hyroxbox.core.config import get_settings
from hyroxbox.db.models import HyroxBox, Region

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------

_settings = get_settings()
DATABASE_URL = _settings.DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    DATABASE_URL, echo=False, pool_pre_ping=True, connect_args=connect_args
)


def get_engine():
    """Return the shared SQLModel engine instance."""
    return engine


# ---------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------
DEMO_REGIONS = [
    ("서울", "SEL", "Seoul metropolitan area"),
    ("경기", "GGI", "Gyeonggi province"),
    ("부산", "BUS", None),
    ("대구", "DGU", None),
    ("인천", "ICN", None),
]

DEMO_BOXES = [
    # name, region code, address, features, price, popularity
    ("Hyrox Gangnam", "SEL", "서울 강남구 테헤란로 123", "SkiErg, Sled, Rowing", 250000, 95),
    ("Mapo Performance", "SEL", "서울 마포구 양화로 45", "Sled, Wall Ball", 200000, 80),
    ("Seongsu Strength Lab", "SEL", "서울 성동구 성수이로 7", "Rowing, Burpee", 180000, 60),
    ("Bundang Fit Box", "GGI", "경기 성남시 분당구 정자로 10", "SkiErg, Farmers Carry", 170000, 70),
    ("Suwon Hybrid", "GGI", "경기 수원시 팔달구 효원로 1", "Sandbag, Lunges", 150000, 40),
    ("Haeundae Race Club", "BUS", "부산 해운대구 해운대로 300", "SkiErg, Sled Push", 160000, 75),
    ("Daegu Engine Room", "DGU", "대구 중구 동성로 22", "Rowing, Wall Ball", 140000, 30),
    ("Songdo Conditioning", "ICN", "인천 연수구 컨벤시아대로 50", "Sled Pull, Run", 155000, 50),
]


def seed_demo_data(session: Session) -> None:
    """Insert the demo regions and boxes. Caller commits."""
    by_code: dict[str, Region] = {}
    for name, code, description in DEMO_REGIONS:
        region = Region(name=name, code=code, description=description)
        session.add(region)
        by_code[code] = region
    session.flush()  # get IDs

    for name, code, address, features, price, popularity in DEMO_BOXES:
        session.add(
            HyroxBox(
                name=name,
                region_id=by_code[code].id,
                address=address,
                features=features,
                price=price,
                non_member_price=price // 5 if price else None,
                popularity=popularity,
            )
        )


# ---------------------------------------------------------------------
# Schema initialization (non-destructive + optional one-time seed)
# ---------------------------------------------------------------------
def init_db(seed: bool | None = None) -> None:
    """
    Create all tables if they don't exist and optionally seed demo data.

    - Non-destructive: existing tables are not dropped.
    - Idempotent: demo data is inserted only when there are no regions yet.
    """
    # Import models so that SQLModel sees all table definitions
    from hyroxbox.db import models  # noqa: F401

    SQLModel.metadata.create_all(engine)

    if seed is None:
        seed = _settings.SEED_DEMO_DATA
    if not seed:
        return

    with Session(engine) as session:
        existing = session.exec(select(Region.id).limit(1)).first()
        if existing is not None:
            return

        seed_demo_data(session)
        session.commit()
        log.info(
            "Seeded %d demo regions and %d demo boxes",
            len(DEMO_REGIONS),
            len(DEMO_BOXES),
        )
