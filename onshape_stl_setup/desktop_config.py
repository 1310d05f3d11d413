"""Register the Onshape STL MCP server with the Claude desktop app.

Edits ``claude_desktop_config.json`` in place: makes sure an ``mcpServers``
mapping exists, backs the file up, then writes an entry that launches
``python -m onshape_stl_mcp_server.server`` with the Onshape credentials.
"""
from __future__ import annotations

import argparse
import json
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from onshape_stl_mcp_server.errors import SetupError

SERVER_KEY = "onshape_mcp"
SERVER_MODULE = "onshape_stl_mcp_server.server"
REGISTERED_API_URL = "https://cad.onshape.com/api/v11"
CONFIG_FILENAME = "claude_desktop_config.json"


def default_config_path(
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    platform = platform or sys.platform
    home = home or Path.home()
    environ = os.environ if environ is None else environ
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Claude" / CONFIG_FILENAME
    if platform.startswith("win"):
        appdata = environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / "Claude" / CONFIG_FILENAME
    return home / ".config" / "Claude" / CONFIG_FILENAME


def mask_key(key: Optional[str]) -> str:
    """Show just enough of a key to recognise it: ``abcd...wxyz`` or ``ab...``."""

    if not key:
        return ""
    if len(key) > 8:
        return f"{key[:4]}...{key[-4:]}"
    return f"{key[:2]}..."


def load_config(path: Path) -> Dict[str, Any]:
    """Read the desktop config, creating it (and its directory) when missing.

    A config without ``mcpServers`` gets an empty mapping written back.
    """

    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        config: Dict[str, Any] = {"mcpServers": {}}
        _write_config(path, config)
        print(f"Created new config file: {path}")
        return config

    try:
        config = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SetupError(f"Error checking config file: {exc}") from exc
    if not isinstance(config, dict):
        raise SetupError(f"Error checking config file: expected a JSON object in {path}")

    if not isinstance(config.get("mcpServers"), dict):
        config["mcpServers"] = {}
        _write_config(path, config)
    return config


def backup_config(path: Path, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    backup = path.with_name(f"{path.name}.backup.{stamp}")
    shutil.copy2(path, backup)
    return backup


def build_server_entry(
    access_key: str,
    secret_key: str,
    api_url: str = REGISTERED_API_URL,
    python: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "command": python or sys.executable,
        "args": ["-m", SERVER_MODULE],
        "env": {
            "ONSHAPE_ACCESS_KEY": access_key,
            "ONSHAPE_SECRET_KEY": secret_key,
            "ONSHAPE_API_URL": api_url,
        },
    }


def register_server(
    path: Path,
    entry: Dict[str, Any],
    name: str = SERVER_KEY,
    now: Optional[datetime] = None,
) -> Path:
    """Back up ``path`` and add or replace ``mcpServers[name]``. Returns the backup path."""

    config = load_config(path)
    backup = backup_config(path, now)
    config["mcpServers"][name] = entry
    _write_config(path, config)
    return backup


def resolve_keys(
    access_key: Optional[str],
    secret_key: Optional[str],
    environ: Optional[Mapping[str, str]] = None,
    prompt: Optional[Callable[[str], str]] = None,
) -> Tuple[str, str]:
    """Pick credentials from flags, then prompts, then the environment.

    With ``prompt=None`` nothing is asked and unspecified keys fall back to
    the environment. Raises :class:`SetupError` if either ends up empty.
    """

    environ = os.environ if environ is None else environ
    env_access = environ.get("ONSHAPE_ACCESS_KEY", "")
    env_secret = environ.get("ONSHAPE_SECRET_KEY", "")

    if access_key is None and prompt is not None:
        access_key = prompt(f"ONSHAPE_ACCESS_KEY [{mask_key(env_access)}]: ").strip()
    if secret_key is None and prompt is not None:
        secret_key = prompt(f"ONSHAPE_SECRET_KEY [{mask_key(env_secret)}]: ").strip()

    final_access = access_key or env_access
    final_secret = secret_key or env_secret
    if not final_access or not final_secret:
        raise SetupError(
            "Both ONSHAPE_ACCESS_KEY and ONSHAPE_SECRET_KEY are required! "
            "Please set them as environment variables or provide them when prompted."
        )
    return final_access, final_secret


def _write_config(path: Path, config: Dict[str, Any]) -> None:
    path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onshape-stl-setup",
        description="Register the Onshape STL MCP server with the Claude desktop app",
    )
    parser.add_argument("--config", help="Path to claude_desktop_config.json (default: platform location)")
    parser.add_argument("--name", default=SERVER_KEY, help="Key used under mcpServers")
    parser.add_argument("--access-key", dest="access_key", help="Onshape API access key")
    parser.add_argument("--secret-key", dest="secret_key", help="Onshape API secret key")
    parser.add_argument("--api-url", dest="api_url", default=REGISTERED_API_URL, help="Onshape API base URL")
    parser.add_argument(
        "--no-input",
        dest="no_input",
        action="store_true",
        help="Do not prompt; use flags and environment variables only",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    args = _build_parser().parse_args(None if argv is None else list(argv))
    config_path = Path(args.config).expanduser() if args.config else default_config_path()

    print("Setting up Onshape MCP Server...")
    print(f"Config file: {config_path}")

    try:
        load_config(config_path)
        print("Please enter your Onshape API credentials. Leave blank to use current environment variables.")
        access_key, secret_key = resolve_keys(
            args.access_key,
            args.secret_key,
            prompt=None if args.no_input else input,
        )
        entry = build_server_entry(access_key, secret_key, api_url=args.api_url)
        backup = register_server(config_path, entry, name=args.name)
    except (SetupError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Backup created: {backup}")
    print("Configuration updated successfully!")
    print()
    print("Summary:")
    print(f"   - Server command: {entry['command']} {' '.join(entry['args'])}")
    print(f"   - Config file: {config_path}")
    print(f"   - Server name: {args.name}")
    print(f"   - API URL: {args.api_url}")
    print()
    print("Important: restart Claude Desktop for changes to take effect.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
