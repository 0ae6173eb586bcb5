"""Load store rental settings from YAML documents."""

from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from rentalcore.errors import ValidationFailedError
from rentalcore.logging import get_logger
from rentalcore.models.store import StoreSettings

logger = get_logger(__name__)


class StoreConfigError(ValidationFailedError):
    """Store settings document is unreadable or invalid."""

    default_key = "errors.invalidStoreSettings"
    template = "invalid_store_settings"


def _read_yaml(path: Union[str, Path]) -> Any:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise StoreConfigError(f"Cannot read {path}: {e}", params={"source": str(path)}) from e


def parse_store_settings(data: Any, source: str = "<inline>") -> StoreSettings:
    """Validate a mapping into StoreSettings."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise StoreConfigError(
            f"{source}: expected a mapping, got {type(data).__name__}", params={"source": source}
        )
    try:
        return StoreSettings.model_validate(data)
    except ValidationError as e:
        logger.warning("store_settings_invalid", source=source, errors=e.error_count())
        raise StoreConfigError(f"{source}: {e}", params={"source": source}) from e


def load_store_settings(path: Union[str, Path]) -> StoreSettings:
    """Read one store's settings."""
    return parse_store_settings(_read_yaml(path), source=str(path))


def load_store_profiles(path: Union[str, Path]) -> dict[str, StoreSettings]:
    """Read a ``slug: settings`` mapping of several stores."""
    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise StoreConfigError(f"{path}: expected a mapping of store slugs", params={"source": str(path)})

    profiles = {
        str(slug): parse_store_settings(settings, source=f"{path}:{slug}")
        for slug, settings in data.items()
    }
    logger.info("store_profiles_loaded", path=str(path), stores=len(profiles))
    return profiles
