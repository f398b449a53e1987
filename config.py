import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value):
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY")
    PREDICTIONS_TABLE = os.getenv("PREDICTIONS_TABLE", "cardiovascular_predictions")

    ML_SERVICE_URL = os.getenv("ML_SERVICE_URL", "https://api-ml-production.up.railway.app").rstrip("/")
    ML_TIMEOUT = float(os.getenv("ML_TIMEOUT", 15))
    ML_HEALTH_TIMEOUT = float(os.getenv("ML_HEALTH_TIMEOUT", 10))

    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"))
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "60 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "True") == "True"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SUPABASE_URL = None
    SUPABASE_KEY = None
    ML_SERVICE_URL = "http://ml.test"
    RATELIMIT_ENABLED = False
