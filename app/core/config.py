from pydantic_settings import BaseSettings
from pydantic import Field
import os
from pathlib import Path
from dotenv import load_dotenv

# Make .env visible to os.getenv as well (ENVIRONMENT)
load_dotenv()


class Config(BaseSettings):
    # Database Configuration (SQLite via aiosqlite by default)
    database_url: str = Field(
        default=f"sqlite+aiosqlite:///{Path(__file__).parent.parent.parent / 'data' / 'assets.db'}",
        alias="DB_URL",
    )

    # JWT Configuration
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Asset-ledger API client (used by the transaction entry engine)
    api_base_url: str = Field(default="http://127.0.0.1:8000/api", alias="API_BASE_URL")
    api_token: str = Field(default="", alias="API_TOKEN")
    api_timeout_seconds: float = Field(default=10.0, alias="API_TIMEOUT_SECONDS")
    asset_search_page_size: int = Field(default=10, alias="ASSET_SEARCH_PAGE_SIZE")

    # AWS / S3 Configuration (transaction attachments)
    aws_region: str = Field(default="", alias="MY_AWS_REGION")
    aws_access_key_id: str = Field(default="", alias="MY_AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str = Field(default="", alias="MY_AWS_SECRET_ACCESS_KEY")
    s3_bucket_name: str = Field(default="", alias="S3_BUCKET_NAME")
    s3_attachment_prefix: str = Field(
        default="transactions/attachments/", alias="S3_ATTACHMENT_PREFIX"
    )

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Instantiate the settings
config = Config()
