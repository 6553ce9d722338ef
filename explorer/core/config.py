from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Where the dataset image lives: http(s) URL, file:// URL or plain path
    DATASET_URL: str = "./pbp_2021.sqlite"
    # Optional SQLite loadable extension, empty means none
    ENGINE_EXTENSION_PATH: str = ""
    FETCH_TIMEOUT_SECONDS: float = 30.0

    EXPORT_FILENAME_STEM: str = "results"
    EXPORT_NULL_SENTINEL: str = ""

    DEFAULT_QUERY: str = (
        "select count(*) as 'sacks', formation from plays "
        "where is_sack = true group by formation"
    )
    LOG_LEVEL: str = "INFO"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create a single instance of the settings to use everywhere
settings = Settings()
