"""Application configuration using Pydantic Settings."""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database path settings."""
    
    model_config = SettingsConfigDict(env_prefix="KINSHIP_DB_")
    
    members_db_path: str = "data/members.db"
    graph_db_path: str = "data/family_graph.db"
    
    def ensure_dirs(self) -> None:
        """Create parent directories for both databases."""
        for path in (self.members_db_path, self.graph_db_path):
            Path(path).parent.mkdir(parents=True, exist_ok=True)


class TreeSettings(BaseSettings):
    """Tree traversal settings."""
    
    model_config = SettingsConfigDict(env_prefix="KINSHIP_TREE_")
    
    # Pedigree and fan charts render three generations
    max_generations: int = 3
    default_sibling_type: str = "full"


class Settings(BaseSettings):
    """Main application settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KINSHIP_",
        extra="ignore",
    )
    
    log_level: str = "INFO"
    
    database: DatabaseSettings = DatabaseSettings()
    tree: TreeSettings = TreeSettings()


settings = Settings()
