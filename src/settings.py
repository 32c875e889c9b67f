"""Runtime configuration, read from GENEALOGY_* environment variables or a .env file."""

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class EraSetting(BaseModel):
    id: str
    name: str
    # Inclusive; negative years are BCE
    start_year: int
    end_year: int


DEFAULT_ERAS = [
    EraSetting(id="antediluvian", name="Antediluvian", start_year=-4000, end_year=-2350),
    EraSetting(id="postdiluvian", name="Postdiluvian", start_year=-2349, end_year=-2000),
    EraSetting(id="patriarchal", name="Patriarchal", start_year=-1999, end_year=-1500),
    EraSetting(id="exodus-conquest", name="Exodus and Conquest", start_year=-1499, end_year=-1100),
    EraSetting(id="judges-kings", name="Judges and Kings", start_year=-1099, end_year=-586),
    EraSetting(id="exile-return", name="Exile and Return", start_year=-585, end_year=-400),
    EraSetting(id="intertestamental", name="Intertestamental", start_year=-399, end_year=-5),
    EraSetting(id="new-testament", name="New Testament", start_year=-4, end_year=100),
]

DEFAULT_KEY_FIGURES = [
    "adam", "noah", "abraham", "isaac", "jacob", "joseph", "moses", "joshua", "samuel",
    "david", "solomon", "elijah", "isaiah", "jeremiah", "ezekiel", "daniel",
    "john_the_baptist", "jesus", "peter", "paul", "john",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GENEALOGY_", env_file=".env", extra="ignore")

    LOG_LEVEL: str = "WARNING"

    # Overrides the wall-clock year used for ages of living people
    CURRENT_YEAR: int | None = None

    DEFAULT_MAX_DEPTH: int = 10
    # Optional hard stop on generation propagation; cycles are caught without it
    GENERATION_ITERATION_CAP: int | None = None

    SUBGRAPH_MAX_UP: int = 2
    SUBGRAPH_MAX_DOWN: int = 2

    SEARCH_LIMIT: int = 20

    # Era and key-figure tagging; complex values are read from the environment as JSON
    ERAS: list[EraSetting] = DEFAULT_ERAS
    DEFAULT_ERA: str = "unknown"
    KEY_FIGURES: list[str] = DEFAULT_KEY_FIGURES


settings = Settings()
