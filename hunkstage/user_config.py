"""User configuration management for hunkstage.

Handles reading and writing the .hunkstage/config.yaml file in each
repository and validating it into a StatusConfig.
"""

import copy
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


class ConfigError(Exception):
    """Raised when the repository configuration cannot be read."""

    pass


# Section keys in render order
SECTION_KEYS = [
    "rebase",
    "sequencer",
    "untracked",
    "unstaged",
    "staged",
    "stashes",
    "unpulled_pushRemote",
    "unmerged_pushRemote",
    "unpulled_upstream",
    "unmerged_upstream",
    "recent",
]

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "sections": {
        "rebase": {"hidden": False, "folded": False},
        "sequencer": {"hidden": False, "folded": False},
        "untracked": {"hidden": False, "folded": False},
        "unstaged": {"hidden": False, "folded": False},
        "staged": {"hidden": False, "folded": False},
        "stashes": {"hidden": False, "folded": True},
        "unpulled_pushRemote": {"hidden": False, "folded": True},
        "unmerged_pushRemote": {"hidden": False, "folded": False},
        "unpulled_upstream": {"hidden": False, "folded": True},
        "unmerged_upstream": {"hidden": False, "folded": False},
        "recent": {"hidden": False, "folded": True},
    },
    # New files start collapsed to their name line
    "items_folded": True,
    "disable_signs": False,
    "disable_context_highlighting": False,
    "disable_hint": True,
    "recent_count": 10,
    "refresh_timeout": 10.0,
    # Terminal width below which mode labels are not padded
    "wide_columns": 120,
}


class SectionConfig(BaseModel):
    """Per-section display settings."""

    hidden: bool = False
    folded: bool = False


def _default_sections() -> dict[str, SectionConfig]:
    return {key: SectionConfig(**value) for key, value in DEFAULT_CONFIG["sections"].items()}


class StatusConfig(BaseModel):
    """Validated status buffer configuration."""

    sections: dict[str, SectionConfig] = Field(default_factory=_default_sections)
    items_folded: bool = True
    disable_signs: bool = False
    disable_context_highlighting: bool = False
    disable_hint: bool = True
    recent_count: int = 10
    refresh_timeout: float = 10.0
    wide_columns: int = 120

    def section(self, key: str) -> SectionConfig:
        """Get the settings for a section, defaulting to visible and open."""
        return self.sections.get(key) or SectionConfig()


def default_status_config() -> StatusConfig:
    """Build a StatusConfig from DEFAULT_CONFIG."""
    return StatusConfig.model_validate(DEFAULT_CONFIG)


def get_config_dir(repo_root: Path) -> Path:
    """Get the repository config directory.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to .hunkstage/
    """
    return repo_root / ".hunkstage"


def get_config_file(repo_root: Path) -> Path:
    """Return path to the config.yaml file."""
    return get_config_dir(repo_root) / "config.yaml"


def _merge(defaults: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(repo_root: Path) -> dict:
    """Load the hunkstage configuration from config.yaml.

    Missing keys are filled in from DEFAULT_CONFIG.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Configuration dictionary.

    Raises:
        ConfigError: If the file exists but is not valid YAML.
    """
    config_file = get_config_file(repo_root)

    if not config_file.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"Failed to load config from {config_file}: expected a mapping")

    return _merge(DEFAULT_CONFIG, config)


def save_config(repo_root: Path, config: dict) -> None:
    """Save the configuration to config.yaml.

    Args:
        repo_root: The root directory of the git repository.
        config: Configuration dictionary to save.
    """
    config_file = get_config_file(repo_root)

    # Ensure directory exists
    config_file.parent.mkdir(exist_ok=True)

    with open(config_file, "w") as f:
        yaml.dump(
            config,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def get_status_config(repo_root: Path) -> StatusConfig:
    """Load and validate the status configuration for a repository.

    Raises:
        ConfigError: If the file is unreadable or fails validation.
    """
    config = load_config(repo_root)
    try:
        return StatusConfig.model_validate(config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {get_config_file(repo_root)}:\n{e}")


def set_section_option(repo_root: Path, section: str, option: str, value: bool) -> None:
    """Set `hidden` or `folded` for one section and save.

    Raises:
        ConfigError: If the section or option is unknown.
    """
    if section not in SECTION_KEYS:
        raise ConfigError(f"Unknown section: {section}")
    if option not in ("hidden", "folded"):
        raise ConfigError(f"Unknown section option: {option}")

    config = load_config(repo_root)
    config["sections"].setdefault(section, {})[option] = value
    save_config(repo_root, config)
