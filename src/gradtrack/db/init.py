from __future__ import annotations

import logging

from gradtrack.db.base import Base
from gradtrack.db.session import engine
from gradtrack.db import models  # noqa: F401

logger = logging.getLogger(__name__)


def init_database() -> dict[str, list[str]]:
    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables)
    logger.info("Database ready (%s)", ", ".join(tables))
    return {"tables": tables}
