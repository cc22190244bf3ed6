import os
from dotenv import load_dotenv
load_dotenv()


def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off")


class Settings:
    """Base configuration class"""

    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # Supabase: config file first, env variables otherwise
    SUPABASE_CONFIG_FILE = os.getenv("SUPABASE_CONFIG_FILE", "supabase.json")
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
    SURVEY_TABLE = os.getenv("SURVEY_TABLE", "reponses_sondage")

    # Live stats
    REALTIME_ENABLED = _flag("REALTIME_ENABLED")
    STATS_DEBOUNCE_MS = int(os.getenv("STATS_DEBOUNCE_MS", 400))
    STATS_RESUBSCRIBE_MS = int(os.getenv("STATS_RESUBSCRIBE_MS", 1000))
    STATS_DAILY_WINDOW = int(os.getenv("STATS_DAILY_WINDOW", 7))
    STREAM_KEEPALIVE_SECONDS = float(os.getenv("STREAM_KEEPALIVE_SECONDS", 15))
    STREAM_QUEUE_SIZE = int(os.getenv("STREAM_QUEUE_SIZE", 16))


class DevelopmentConfig(Settings):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Settings):
    """Production configuration"""
    DEBUG = False
    TESTING = False


class TestingConfig(Settings):
    """Testing configuration"""
    TESTING = True
    REALTIME_ENABLED = False
    SUPABASE_CONFIG_FILE = None
    SUPABASE_URL = None
    SUPABASE_ANON_KEY = None


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
