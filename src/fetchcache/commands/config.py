"""Config commands -- view and change the global configuration file.

Provides the ``fetchcache config`` sub-command group. Settings live in
``config.json`` under :func:`~fetchcache.config.get_config_dir` and hold the
lowest-precedence defaults: storage root, cache folder name, status checking,
and output format.
"""

from __future__ import annotations

from typing import Any, NoReturn

import typer
from pydantic import ValidationError

from fetchcache.exit_codes import EXIT_INVALID_USAGE
from fetchcache.models import GlobalConfig
from fetchcache.output import error, info, print_result, success

config_app = typer.Typer(no_args_is_help=True)

_BOOL_WORDS = {
    "true": True,
    "yes": True,
    "1": True,
    "false": False,
    "no": False,
    "0": False,
}


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration.

    Prints one ``key = value`` line per setting, or the whole document with
    ``--json``.

    Example::

        fetchcache config show
        fetchcache --json config show
    """
    from fetchcache.config import get_config_dir, load_global_config

    data = load_global_config().model_dump(mode="json")
    info(f"Config directory: {get_config_dir()}")
    lines = [f"{key} = {_display(value)}" for key, value in _flatten(data)]
    print_result("\n".join(lines), data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted config key, e.g. 'cache.folder_name'."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Set a configuration value.

    Boolean settings accept ``true``/``false``, ``yes``/``no`` or ``1``/``0``.
    The result is validated against :class:`~fetchcache.models.GlobalConfig`
    before it is written.

    Example::

        fetchcache config set cache.root ~/media
        fetchcache config set cache.raise_for_status true
        fetchcache config set output.format json
    """
    from fetchcache.config import load_global_config

    data = load_global_config().model_dump(mode="json")

    *sections, leaf = key.split(".")
    target = data
    for section in sections:
        target = target.get(section)
        if not isinstance(target, dict):
            _usage_error(f"Invalid config key: {key}")
    if leaf not in target or isinstance(target[leaf], dict):
        _usage_error(f"Unknown config key: {key}")

    if isinstance(target[leaf], bool):
        if value.lower() not in _BOOL_WORDS:
            _usage_error(f"Expected true or false for {key}, got: {value}")
        target[leaf] = _BOOL_WORDS[value.lower()]
    else:
        target[leaf] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        _usage_error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")

    _save(new_config)
    success(f"Set {key} = {_display(target[leaf])}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Reset the configuration to defaults.

    Example::

        fetchcache config reset --yes
    """
    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    _save(GlobalConfig())
    success("Configuration reset to defaults.")


def _save(config: GlobalConfig) -> None:
    from fetchcache.config import save_global_config
    from fetchcache.exceptions import ConfigError

    try:
        save_global_config(config)
    except OSError as exc:
        raise ConfigError(f"Cannot write config: {exc}") from exc


def _usage_error(message: str) -> NoReturn:
    error(message)
    raise typer.Exit(code=EXIT_INVALID_USAGE)


def _flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = []
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            pairs.extend(_flatten(value, prefix=f"{dotted}."))
        else:
            pairs.append((dotted, value))
    return pairs


def _display(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
