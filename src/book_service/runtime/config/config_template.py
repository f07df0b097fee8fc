"""Loading of ``config.yaml`` with shell-style environment placeholders.

Placeholders take three forms:

``${NAME}``
    The variable must be set.
``${NAME:-fallback}``
    ``fallback`` (possibly empty) is used when the variable is unset.
``${NAME:?reason}``
    The variable must be set; ``reason`` is included in the error.
"""

import os
import re
from pathlib import Path

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from src.book_service.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}")


def _resolve(match: re.Match[str]) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.environ.get(name)
    if value is not None:
        return value
    if op == "-":
        return arg
    if op == "?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Expand every placeholder in ``text`` from the process environment.

    Raises:
        ValueError: If a placeholder without a fallback names an unset variable.
    """
    return _PLACEHOLDER.sub(_resolve, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_``-prefixed variables over their unprefixed names.

    With ``APP_ENVIRONMENT=test``, ``TEST_MYSQL_ADDR`` replaces ``MYSQL_ADDR``.
    """
    prefix = f"{env_mode.upper()}_"
    promoted = {
        name.removeprefix(prefix): value
        for name, value in os.environ.items()
        if name.startswith(prefix)
    }
    if promoted:
        logger.info("Environment {} overrides {}", env_mode, sorted(promoted))
        os.environ.update(promoted)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read ``file_path``, expand its placeholders and validate the ``config`` section.

    A ``.env`` file beside ``file_path`` is loaded first; variables already in
    the process environment take precedence over it.

    Raises:
        FileNotFoundError: If ``file_path`` does not exist.
        ValueError: If a required variable is missing, the YAML is malformed,
            or the values fail validation.
    """
    template = file_path.read_text(encoding="utf-8")
    load_dotenv(file_path.parent / ".env", override=False)

    env_mode = os.environ.get("APP_ENVIRONMENT", "development")
    logger.info("Loading {} for the {} environment", file_path, env_mode)
    apply_environment_overrides(env_mode)

    try:
        document = yaml.safe_load(substitute_env_vars(template))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML in {file_path}: {e}") from e
    if not isinstance(document, dict):
        raise ValueError(f"Failed to parse YAML in {file_path}: expected a mapping")

    try:
        return ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {file_path}: {e}") from e
