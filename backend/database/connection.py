import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from backend.config import REPO_ROOT, staging_database_url

logger = logging.getLogger(__name__)


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or staging_database_url()
    if url.startswith("sqlite:///"):
        # default file lives under data/, which is not in the repo
        (REPO_ROOT / "data").mkdir(exist_ok=True)
        # Streamlit serves each browser session on its own thread
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(url, pool_pre_ping=True)
    logger.info("Staging store engine: %s", engine.url.render_as_string(hide_password=True))
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return make_engine()
