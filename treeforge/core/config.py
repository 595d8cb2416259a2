import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, model_validator

from treeforge.core.models.input import Permission, parse_user_input

log = logging.getLogger(__name__)
config = None


class Config(BaseModel, extra="forbid"):
    """Singleton that provides default configuration for the treeforge process."""

    # directories and files are created with this mode, narrowed later by set_perms
    materialize_mode: Permission = 0o777
    content_create_mode: Permission = 0o755
    hash_chunk_size: int = 10240

    render_marker: str = "---"
    render_padding: int = 3

    allow_duplicate_names: bool = True
    finalize_root_permission: bool = False

    @model_validator(mode="after")
    def _check_positive_sizes(self) -> "Config":
        if self.hash_chunk_size <= 0:
            raise ValueError(f"hash_chunk_size must be positive, got {self.hash_chunk_size}")
        if self.render_padding < 0:
            raise ValueError(f"render_padding must not be negative, got {self.render_padding}")
        return self


def get_config() -> Config:
    """Get the configuration singleton."""
    global config

    if not config:
        config = Config()

    return config


def set_config(path: Path) -> None:
    """Set global config variable using input from file."""
    global config

    config = parse_user_input(Config.model_validate, yaml.safe_load(path.read_text()) or {})
    log.debug("Loaded configuration from %s", path)


def reset_config() -> None:
    """Drop the configuration singleton, the next get_config() call starts from defaults."""
    global config

    config = None
