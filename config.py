"""
config.py : soltest 인터프리터 설정 (환경변수, 접두사 SOLTEST_).
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # harness 객체의 식별자 / 선언 타입
    harness_name: str = "soltest"
    harness_type: str = "contract Soltest"

    # assert 로 인식할 함수명
    assert_name: str = "assert"

    # 테스트 함수 탐색
    test_prefix: str = "test"

    # solc (py-solc-x)
    solc_version: str = "0.8.0"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SOLTEST_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
