from typing import List, Union
import logging

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    PROJECT_NAME: str = "PC配件报价系统"
    API_PREFIX: str = "/api"

    # 运行环境：development 时错误响应会附带异常详情
    ENVIRONMENT: str = "production"

    # CORS配置
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # 数据库配置
    SQLITE_DATABASE_URI: str = "sqlite:///./quotedesk.db"

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # 编号规则
    PARTY_ID_PREFIX: str = "P"
    PARTY_ID_WIDTH: int = 3
    QUOTATION_NUMBER_PREFIX: str = "QT"

    # 报价单规则
    QUOTATION_VALID_DAYS: int = Field(default=30, ge=1, description="修订版报价单有效天数")
    DEFAULT_GST_PERCENTAGE: float = 18
    DEFAULT_HSN_SAC: str = "84733099"
    # 进价/售价是否已含税（决定毛利按含税价还是不含税价计算）
    PRICES_INCLUDE_GST: bool = True

    # 启动时若配件目录为空则写入默认配件
    SEED_COMPONENTS_ON_STARTUP: bool = True

    # 报价单默认商户信息
    BUSINESS_NAME: str = "EmpressPC"
    BUSINESS_ADDRESS: str = "123 Tech Street, Lucknow, UP 226001"
    BUSINESS_PHONE: str = "+91 9876543210"
    BUSINESS_EMAIL: str = "contact@empresspc.in"
    BUSINESS_GSTIN: str = "GSTIN1234567890"
    BUSINESS_LOGO: str = "/logo.png"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def default_business_details(self) -> dict:
        """报价单上默认的商户信息"""
        return {
            "name": self.BUSINESS_NAME,
            "address": self.BUSINESS_ADDRESS,
            "phone": self.BUSINESS_PHONE,
            "email": self.BUSINESS_EMAIL,
            "gstin": self.BUSINESS_GSTIN,
            "logo": self.BUSINESS_LOGO,
        }

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
logger.info(f"加载配置: API_PREFIX={settings.API_PREFIX}, CORS={settings.BACKEND_CORS_ORIGINS}")
