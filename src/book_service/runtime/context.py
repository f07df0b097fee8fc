"""Process-wide configuration, overridable per task or per block."""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel

from src.book_service.runtime.config.config_data import ConfigData
from src.book_service.runtime.config.config_template import load_templated_yaml

CONFIG_PATH = Path("config.yaml")

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class AppContext:
    """Everything a request or command needs to know about its environment."""

    config: ConfigData


def _initial_context() -> AppContext:
    # Without a config.yaml in the working directory the model defaults apply
    if CONFIG_PATH.exists():
        return AppContext(config=load_templated_yaml(CONFIG_PATH))
    return AppContext(config=ConfigData())


_app_context: ContextVar[AppContext] = ContextVar(
    "book_service_context", default=_initial_context()
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Install ``context`` for the current task; the token undoes it."""
    return _app_context.set(context)


def _overlay(base: ModelT, override: ModelT) -> ModelT:
    """Copy ``base`` with the fields explicitly set on ``override``.

    Nested models are overlaid field by field rather than replaced.
    """
    changes = {}
    for name in override.model_fields_set:
        incoming = getattr(override, name)
        current = getattr(base, name)
        if isinstance(incoming, BaseModel) and isinstance(current, BaseModel):
            incoming = _overlay(current, incoming)
        changes[name] = incoming
    return base.model_copy(update=changes)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Run a block with some configuration values replaced.

    >>> with with_context(ConfigData(app=AppConfig(port=9999))):
    ...     get_config().app.port
    9999
    """
    if config_override is None:
        yield
        return
    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override).__name__}"
        )

    current = get_context()
    token = set_context(replace(current, config=_overlay(current.config, config_override)))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
