from sqlalchemy import create_engine, event, text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker, Session
import logging
import os

# モデル定義側の Base（gehl.models.base）を利用してメタデータを統一
from gehl.models.base import Base, SCHEMA
from gehl.services.registry.fields import DATABASE_ENUMS

logger = logging.getLogger(__name__)


def database_url():
    # 1) DATABASE_URL が指定されていれば優先（例: postgresql+psycopg://...）
    # 2) それ以外は db_* 環境変数から組み立てる
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return URL.create(
        "postgresql+psycopg",
        username=os.getenv("db_user", "postgres"),
        password=os.getenv("db_pass"),
        host=os.getenv("db_host", "localhost"),
        port=int(os.getenv("db_port", "5432")),
        database=os.getenv("db_name", "gehl"),
    )


POOL_SIZE = int(os.getenv("db_pool_size", "10"))
# idle client timeout in milliseconds
CLIENT_TIMEOUT_MS = int(os.getenv("db_client_timeout", "30000"))

engine = create_engine(
    database_url(),
    pool_size=POOL_SIZE,
    pool_recycle=max(CLIENT_TIMEOUT_MS // 1000, 1),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(engine, "invalidate")
def _on_invalidate(dbapi_connection, connection_record, exception):
    # idle connection dropped by the server / network partition
    logger.error("pooled connection invalidated: %s", exception)


SURVEY_TO_TABLENAME_VIEW = f"""
CREATE OR REPLACE VIEW {SCHEMA}.survey_to_tablename AS
SELECT svy.survey_id, stu.study_id, stu.tablename, stu.table_definition
FROM {SCHEMA}.survey AS svy
JOIN {SCHEMA}.study AS stu ON svy.study_id = stu.study_id
"""


def init_db(bind=None) -> None:
    # パッケージ配下の各モデルモジュールを明示 import してメタデータ登録を確実化
    import gehl.models.user  # noqa: F401
    import gehl.models.study  # noqa: F401
    import gehl.models.surveyor  # noqa: F401
    import gehl.models.location  # noqa: F401
    import gehl.models.survey  # noqa: F401

    with (bind or engine).begin() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}"))
        # per-study tables use these types
        for name, values in DATABASE_ENUMS.items():
            ENUM(*values, name=name, schema=SCHEMA).create(conn, checkfirst=True)
        Base.metadata.create_all(bind=conn)
        conn.execute(text(SURVEY_TO_TABLENAME_VIEW))
    logger.info("database schema ready")


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
