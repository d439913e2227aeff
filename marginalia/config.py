from pydantic_settings import BaseSettings

from marginalia.domain.links import RelationshipType


class Settings(BaseSettings):
    # Basic auth settings, requests are rejected until a password is configured
    auth_username: str = "admin"
    auth_password: str = ""

    # Storage settings
    notes_store_path: str = "data/notes.json"
    links_store_path: str = "data/links.json"
    reminders_store_path: str = "data/reminders.json"

    # Linking settings
    default_relationship_type: RelationshipType = "relates_to"
    exclude_self_links: bool = True
    autocomplete_default_limit: int = 10
    autocomplete_max_limit: int = 20

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
