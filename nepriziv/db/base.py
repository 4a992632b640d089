import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker

from nepriziv.core.config import settings

logger = logging.getLogger(__name__)

# 莫斯科时区（UTC+3）
MSK_TIMEZONE = timezone(timedelta(hours=3))


def get_msk_datetime() -> datetime:
    """获取当前莫斯科时间（去掉tzinfo，数据库统一存储naive时间）"""
    return datetime.now(MSK_TIMEZONE).replace(tzinfo=None)


def to_msk_naive(value: datetime) -> datetime:
    """把带时区的时间换算成莫斯科naive时间，naive时间原样返回"""
    if value.tzinfo is None:
        return value
    return value.astimezone(MSK_TIMEZONE).replace(tzinfo=None)


def _engine_kwargs(uri: str) -> dict:
    if uri.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
    }


# 创建数据库引擎
engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, echo=False, **_engine_kwargs(settings.SQLALCHEMY_DATABASE_URI))

# 创建数据库会话
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 创建基本模型类
Base = declarative_base()


def _ensure_mysql_database(db_uri: str) -> None:
    """MySQL下库不存在时先建库"""
    url = make_url(db_uri)
    db_name = url.database
    server_engine = create_engine(url.set(database=None))
    with server_engine.connect() as connection:
        result = connection.execute(text("SHOW DATABASES LIKE :name"), {"name": db_name})
        if not result.fetchone():
            connection.execute(text(f"CREATE DATABASE `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"))
            logger.info(f"数据库 {db_name} 已创建")
        else:
            logger.info(f"数据库 {db_name} 已存在")
    server_engine.dispose()


def init_db(bind=None):
    """
    初始化数据库，如果表不存在则创建
    """
    if not settings.CREATE_TABLES:
        logger.info("自动创建表功能已禁用")
        return

    # 注册全部模型到Base.metadata
    import nepriziv.models  # noqa: F401

    target = bind or engine
    try:
        if target.url.get_backend_name() == "mysql":
            _ensure_mysql_database(str(target.url))
        Base.metadata.create_all(bind=target)
        logger.info("所有表已创建或已存在")
    except Exception as e:
        logger.error(f"初始化数据库时出错: {str(e)}")
        raise
