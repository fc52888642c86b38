import re
import logging
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, declarative_base
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from resourcio.config import DATABASE_URL as _raw_url

_logger = logging.getLogger(__name__)


def normalize_database_url(raw_url: str) -> tuple[str, dict]:
    """Rewrite a Supabase/Render style URL for psycopg2 and pull SSL flags into connect_args."""
    if not raw_url.startswith(("postgres://", "postgresql")):
        return raw_url, {}

    url = re.sub(r'^postgres(ql)?(\+\w+)?://', 'postgresql+psycopg2://', raw_url)

    parsed = urlparse(url)
    params = parse_qs(parsed.query)
    needs_ssl = bool(params.pop("ssl", None) or params.pop("sslmode", None))
    clean_query = urlencode({k: v[0] for k, v in params.items()}) if params else ""
    url = urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, clean_query, parsed.fragment))
    url = url.rstrip('?&')

    connect_args = {}
    if needs_ssl or "supabase.co" in raw_url or "pooler.supabase.com" in raw_url:
        connect_args["sslmode"] = "require"
    return url, connect_args


DATABASE_URL, _connect_args = normalize_database_url(_raw_url)

_logger.info("DB URL normalized: %s...  ssl=%s", DATABASE_URL[:50], bool(_connect_args))

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_409(db, detail: str):
    """Commit, turning a uniqueness/foreign-key violation into a 409."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        _logger.info("Integrity error on commit: %s", e.orig)
        raise HTTPException(status_code=409, detail=detail)
