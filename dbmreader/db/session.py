from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from dbmreader.core.config import DB_PATH


def make_engine(db_path: Optional[Path] = None) -> Engine:
    db_path = Path(db_path) if db_path is not None else DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{db_path}", echo=False)


def get_session(engine: Engine) -> Session:
    return Session(engine)
