from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Redis
    redis_url: str = "redis://localhost:6379/2"  # 0/1은 Celery broker/backend

    # Celery
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Face detection
    face_detection_provider: str = "haar"  # "haar" | "yunet"
    haar_cascade_path: str = ""  # 비어 있으면 OpenCV 기본 cascade 사용
    yunet_model_path: str = "models/face_detection_yunet_2023mar.onnx"
    yunet_score_threshold: float = 0.6
    face_detect: bool = True

    # Pipeline
    output_dir_name: str = "Output"
    jpeg_quality: int = 100
    max_workers: int = 1

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
