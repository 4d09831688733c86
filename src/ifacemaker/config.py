import json
from pathlib import Path
from typing import Any

import commentjson  # type: ignore

from .errors import ConfigError
from .models import MakerOptions

REQUIRED_KEYS = ("files", "struct", "iface", "pkg")


class ConfigurationManager:
    """
    Manages loading and merging of application configuration.
    """

    def __init__(self, *, base_path: Path | None = None) -> None:
        self._base_path = base_path or Path(__file__).parent

    def load_config(
        self, user_config_path: str | None, cli_overrides: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Loads defaults, merges with user JSONC, and applies CLI overrides.
        """
        config = self._load_defaults()

        if user_config_path:
            self._merge_user_file(config, Path(user_config_path))

        # Apply CLI overrides (filtering out None values)
        config.update({k: v for k, v in cli_overrides.items() if v is not None})

        missing = [k for k in REQUIRED_KEYS if not config.get(k)]
        if missing:
            raise ConfigError(f"Missing required option(s): {', '.join(missing)}")
        if isinstance(config["files"], str):
            config["files"] = [config["files"]]

        return config

    @staticmethod
    def build_options(config: dict[str, Any]) -> MakerOptions:
        """
        Turns a merged configuration into MakerOptions.
        The output location is `pkg_dir` when set, else the output file's directory.
        """
        output_dir: Path | None = None
        if config.get("pkg_dir"):
            output_dir = Path(config["pkg_dir"]).resolve()
        elif config.get("output"):
            output_dir = Path(config["output"]).resolve().parent

        return MakerOptions(
            struct_name=config["struct"],
            iface_name=config["iface"],
            pkg_name=config["pkg"],
            copy_docs=bool(config.get("copy_docs", True)),
            output_dir=output_dir,
        )

    def _load_defaults(self) -> dict[str, Any]:
        defaults_path = self._base_path / "defaults.json"
        if not defaults_path.exists():
            return {}

        with open(defaults_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _merge_user_file(self, config: dict[str, Any], path: Path) -> None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                user_conf = commentjson.load(f)
        except Exception as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e
        if not isinstance(user_conf, dict):
            raise ConfigError(f"Config file {path} must hold a JSON object")
        config.update(user_conf)
