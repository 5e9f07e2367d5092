from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from dbmreader.models import Chapter  # noqa: F401  registers the table


def init_db(engine: Engine):

    SQLModel.metadata.create_all(engine)
