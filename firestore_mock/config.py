"""
Central mock configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden via an environment variable carrying the
`FIRESTORE_MOCK_` prefix (case-insensitive), e.g.:

    FIRESTORE_MOCK_AUTO_ID_LENGTH=8 pytest      # shorter generated ids
    export FIRESTORE_MOCK_COERCE_DATE_STRINGS=false

A `.env` file at the project root is loaded automatically.
"""

import string

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_MOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Generated document ids                                              #
    # ------------------------------------------------------------------ #
    auto_id_length: int = Field(
        20, ge=1, description="Characters in an auto-generated document id (matches Firestore)"
    )
    auto_id_alphabet: str = Field(
        string.ascii_letters + string.digits,
        min_length=1,
        description="Characters an auto-generated document id is drawn from",
    )

    # ------------------------------------------------------------------ #
    # Query evaluation                                                    #
    # ------------------------------------------------------------------ #
    coerce_date_strings: bool = Field(
        True, description="Compare ISO-8601 strings as instants when the other side is a date"
    )

    # ------------------------------------------------------------------ #
    # Snapshots                                                           #
    # ------------------------------------------------------------------ #
    clone_snapshots: bool = Field(
        True, description="Deep-copy document data into snapshots at read time"
    )


# Single shared instance, used when a mock is built without its own.
settings = Settings()
