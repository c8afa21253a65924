"""CLI entry point for the weather sync client."""

import argparse
import logging
import signal
from pathlib import Path

from pydantic import ValidationError

from weathersync.app import WeatherApp
from weathersync.config.defaults import REFRESH_INTERVAL_OPTIONS
from weathersync.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from weathersync.config.schema import AppConfig
from weathersync.models.common import DataKind, TemperatureUnit
from weathersync.models.sync import Notice
from weathersync.reporting.formatters import (
    format_current_text,
    format_forecast_text,
    format_state_line,
)

DEFAULT_CONFIG = "weathersync.yaml"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weathersync",
        description="Current weather and 5-day forecast with offline cache",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Config YAML path")
    parser.add_argument("--data-dir", help="Override cache/settings directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    # fetch
    fetch_p = sub.add_parser("fetch", help="Fetch weather for a location")
    fetch_p.add_argument("location", nargs="?", help="City, 'city,cc', 'zip,cc' or 'lat,lon'")
    fetch_p.add_argument("--unit", help="C, F or K")

    # show
    show_p = sub.add_parser("show", help="Show cached weather without going online")
    show_p.add_argument("location", nargs="?")

    # watch
    watch_p = sub.add_parser("watch", help="Fetch, then keep refreshing on an interval")
    watch_p.add_argument("location", nargs="?")
    watch_p.add_argument("--interval", type=int, help="Minutes between refreshes")

    # warm
    sub.add_parser("warm", help="Pre-fetch all favorites into the cache")

    # favorites list / add / remove
    fav_p = sub.add_parser("favorites", help="Favorite locations")
    fav_sub = fav_p.add_subparsers(dest="favorites_command")
    fav_sub.add_parser("list", help="List favorites")
    add_p = fav_sub.add_parser("add", help="Add a favorite")
    add_p.add_argument("location")
    rm_p = fav_sub.add_parser("remove", help="Remove a favorite and its cached data")
    rm_p.add_argument("location")

    # settings show / set-interval / set-unit
    settings_p = sub.add_parser("settings", help="User settings")
    settings_sub = settings_p.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Display settings")
    interval_p = settings_sub.add_parser("set-interval", help="Auto-refresh minutes (0 disables)")
    interval_p.add_argument("minutes", type=int)
    unit_p = settings_sub.add_parser("set-unit", help="Temperature unit")
    unit_p.add_argument("unit")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    config = load_config(args.config)
    if args.data_dir:
        config = set_config_value(config, "cache.data_dir", args.data_dir)

    if args.command == "config":
        return _cmd_config(config, args)

    weather = WeatherApp.from_config(
        config,
        notify=_print_notice,
        refresh_on_unit_change=args.command == "watch",
    )
    try:
        if args.command == "fetch":
            return _cmd_fetch(weather, args)
        elif args.command == "show":
            return _cmd_show(weather, args)
        elif args.command == "watch":
            return _cmd_watch(weather, args)
        elif args.command == "warm":
            return _cmd_warm(weather)
        elif args.command == "favorites":
            return _cmd_favorites(weather, args)
        elif args.command == "settings":
            return _cmd_settings(weather, args)
        else:
            parser.print_help()
            return 1
    finally:
        weather.close()


def _print_notice(notice: Notice) -> None:
    prefix = "!" if notice.blocking else "*"
    print(f"{prefix} {notice.message}")


def _print_weather(weather: WeatherApp) -> None:
    if weather.view.current is not None:
        print(format_current_text(weather.view.current, weather.view.current_unit or weather.unit))
    if weather.view.forecast is not None:
        print(format_forecast_text(weather.view.forecast))
    print(format_state_line(weather.coordinator.state))


def _cmd_fetch(weather: WeatherApp, args) -> int:
    if args.unit:
        unit = TemperatureUnit.parse(args.unit)
        if unit != weather.unit:
            weather.settings.save_unit(unit)
    state = weather.refresh(args.location, user_initiated=True)
    weather.coordinator.wait_for_cache_warming()
    _print_weather(weather)
    return 0 if state.current_error is None and state.forecast_error is None else 1


def _cmd_show(weather: WeatherApp, args) -> int:
    loaded = weather.show_cached(args.location)
    _print_weather(weather)
    return 0 if loaded else 1


def _cmd_watch(weather: WeatherApp, args) -> int:
    log_dir = Path(weather.config.cache.data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / "weathersync.log")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger = logging.getLogger()
    root_logger.addHandler(file_handler)
    if root_logger.level > logging.INFO:
        root_logger.setLevel(logging.INFO)

    def _on_view_update(kind: DataKind) -> None:
        if kind == DataKind.FORECAST:
            _print_weather(weather)

    weather.view.add_listener(_on_view_update)
    loop = weather.auto_refresh_loop(args.interval)

    def _stop(signum: int, frame: object) -> None:
        print(f"\nReceived {signal.Signals(signum).name}, stopping...")
        loop.stop()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    try:
        weather.refresh(args.location, user_initiated=True)
        if loop.interval_minutes <= 0:
            print("Auto-refresh disabled (set an interval with --interval or settings set-interval)")
            return 0
        print(f"Refreshing {weather.location} every {loop.interval_minutes} minutes. Ctrl-C to stop.")
        loop.run()
        return 0
    finally:
        weather.view.remove_listener(_on_view_update)
        root_logger.removeHandler(file_handler)
        file_handler.close()


def _cmd_warm(weather: WeatherApp) -> int:
    favorites = weather.favorites.locations()
    if not favorites:
        print("No favorites to warm")
        return 0
    summary = weather.coordinator.warmer.warm(favorites)
    print(
        f"Warmed {len(summary.warmed)}, failed {len(summary.failed)}, "
        f"skipped {len(summary.skipped)}"
    )
    return 0 if not summary.failed and not summary.skipped else 1


def _cmd_favorites(weather: WeatherApp, args) -> int:
    if args.favorites_command == "list":
        favorites = weather.favorites.locations()
        if not favorites:
            print("You have no favorite locations yet.")
        for location in favorites:
            print(location)
        return 0
    elif args.favorites_command == "add":
        if weather.favorites.add(args.location):
            print(f"{args.location} added to favorites")
        else:
            print(f"{args.location} is already a favorite")
        return 0
    elif args.favorites_command == "remove":
        if weather.favorites.remove(args.location):
            print(f"{args.location} removed from favorites")
            return 0
        print(f"{args.location} is not a favorite")
        return 1
    else:
        print("Use: favorites list | add LOCATION | remove LOCATION")
        return 1


def _cmd_settings(weather: WeatherApp, args) -> int:
    if args.settings_command == "show":
        settings = weather.settings.load()
        interval = settings.refresh_interval_minutes
        print(f"Auto-refresh: {'disabled' if interval == 0 else f'{interval} minutes'}")
        print(f"Unit: °{settings.unit.value}")
        return 0
    elif args.settings_command == "set-interval":
        if args.minutes not in REFRESH_INTERVAL_OPTIONS:
            print(f"Error: interval must be one of {REFRESH_INTERVAL_OPTIONS}")
            return 1
        weather.settings.save_refresh_interval(args.minutes)
        print(f"Settings saved. Auto-refresh set to {args.minutes} minutes (0 for disabled).")
        return 0
    elif args.settings_command == "set-unit":
        unit = TemperatureUnit.parse(args.unit)
        weather.settings.save_unit(unit)
        print(f"Unit set to °{unit.value}")
        return 0
    else:
        print("Use: settings show | set-interval MINUTES | set-unit UNIT")
        return 1


def _cmd_config(config: AppConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = (part.strip() for part in kv.split("=", 1))
        # Start from the file itself so CLI and env overrides are not written back
        base = load_config(args.config, apply_env=False)
        try:
            new_config = set_config_value(base, key, value)
        except (KeyError, ValueError, ValidationError) as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key} = {get_config_value(new_config, key)} in {args.config}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1
