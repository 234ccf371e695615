from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    db_path: str = "lecturelog.db"
    imports_root: str = "imports"

    # Outlines
    default_outline_title: str = "Imported Outline"
    max_outline_items_warning: int = 50

    # Export
    export_input_file: str = "input.mp4"
    export_output_file: str = "output.mp4"

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = {"env_file": ".env", "env_prefix": "LECTURELOG_", "extra": "ignore"}


settings = Settings()
