import secrets
import os
import json
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import field_validator, Field

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
env_path = os.path.join(project_root, '.env')
load_dotenv(env_path)


class Settings(BaseSettings):
    # 基本设置
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "НеПризыв"
    VERSION: str = "0.1.0"

    # 安全设置
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = "HS256"
    # 60 分钟 * 24 小时 * 8 天 = 8 天
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    # CORS 设置
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080", "https://nepriziv.ru"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            # 先按JSON数组解析，失败再按逗号分隔
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                if v.startswith("[") and v.endswith("]"):
                    v = v.strip("[]").strip()
                    if v:
                        return [i.strip().strip('"\'') for i in v.split(",")]
                    return []
                return [i.strip() for i in v.split(",") if i.strip()]

        if isinstance(v, list):
            return v

        return []

    # 数据库设置
    DB_HOST: str = "localhost"
    DB_PORT: str = "3306"
    DB_USER: str = "root"
    DB_PASSWORD: str = "password"
    DB_NAME: str = os.getenv("DB_NAME", "nepriziv")

    # 显式指定时优先使用，例如 sqlite:///./nepriziv.db
    DATABASE_URI: Optional[str] = None

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        获取数据库URI
        """
        if self.DATABASE_URI:
            return self.DATABASE_URI

        # 默认使用MySQL
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # 是否自动创建数据库表结构
    CREATE_TABLES: bool = True

    # MinIO配置
    MINIO_ENDPOINT: str = os.getenv("MINIO_ENDPOINT", "localhost:9000")
    MINIO_ACCESS_KEY: str = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
    MINIO_SECRET_KEY: str = os.getenv("MINIO_SECRET_KEY", "minioadmin")
    MINIO_SECURE: bool = False
    MEDICAL_DOCUMENTS_BUCKET: str = "medical-documents"
    BLOG_IMAGES_BUCKET: str = "blog-images"
    SIGNED_URL_EXPIRY: int = 3600
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024

    # AI网关配置（OpenAI兼容的chat completions接口）
    AI_GATEWAY_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    AI_GATEWAY_API_KEY: Optional[str] = None
    AI_CHAT_MODEL: str = "google/gemini-2.5-flash"
    AI_IMAGE_MODEL: str = "google/gemini-2.5-flash-image-preview"
    AI_TIMEOUT: int = 120
    AI_IMAGE_MAX_SIDE: int = 1920
    AI_IMAGE_QUALITY: int = 80

    # 邮件通知（Resend）
    RESEND_API_KEY: Optional[str] = None
    NOTIFY_EMAIL_FROM: str = "НеПризыв <onboarding@resend.dev>"
    NOTIFY_EMAIL_TO: str = "admin@nepriziv.ru"

    # 免费额度与演示模式额度
    FREE_DOCUMENT_LIMIT: int = 3
    FREE_AI_LIMIT: int = 3
    DEMO_DOCUMENT_LIMIT: int = 1
    DEMO_AI_LIMIT: int = 1

    # 联系表单限流
    CONTACT_RATE_LIMIT_WINDOW_SECONDS: int = 5 * 60
    CONTACT_RATE_LIMIT_MAX: int = 1

    # 服务器启动配置
    HOST: str = "0.0.0.0"
    PORT: int = 8092
    RELOAD: bool = True

    class Config:
        case_sensitive = True
        env_file = ".env"


# 创建设置实例
settings = Settings()
