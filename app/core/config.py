from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "MentiBY"
    LOG_LEVEL: str = "INFO"

    # Main project: mentor_attendance table
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # Schedule project: cohort schedule tables + mentor directory
    SCHEDULE_SUPABASE_URL: str = ""
    SCHEDULE_SUPABASE_SERVICE_KEY: str = ""

    SCHEDULE_TABLES_RPC: str = "get_schedule_tables"
    MENTOR_TABLE: str = "Mentor Details"
    ATTENDANCE_TABLE: str = "mentor_attendance"

    STORE_TIMEOUT_SECONDS: float = 10.0

    # +05:30 (IST)
    LOCAL_UTC_OFFSET_MINUTES: int = 330
    RESCHEDULE_FALLBACK_DAYS: int = 30
    UPCOMING_SESSION_DAYS: int = 5
    ATTENDANCE_MAX_WORKERS: int = 4

    CORS_ORIGINS: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
