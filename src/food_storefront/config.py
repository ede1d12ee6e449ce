from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SQL_ECHO: bool = False
    DB_TIMEOUT_SECONDS: float = 5.0

    # фиксированная стоимость доставки, добавляется к каждому заказу
    DELIVERY_FEE: Decimal = Decimal("5.00")

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
