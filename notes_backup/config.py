from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Run configuration file (JSON or YAML)
    config_path: str = "backup-config.json"

    # Console logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Passphrase used to unlock stored SMTP credential files
    credential_key: str = ""

    # SMTP
    smtp_timeout: int = 60

    class Config:
        env_file = ".env"
        env_prefix = "NOTES_BACKUP_"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
