import json

import pytest

from ifacemaker.config import ConfigurationManager
from ifacemaker.errors import ConfigError

REQUIRED = {"files": ["foo.go"], "struct": "Foo", "iface": "FooIface", "pkg": "bar2"}


def test_packaged_defaults_apply():
    config = ConfigurationManager().load_config(None, dict(REQUIRED))

    assert config["copy_docs"] is True
    assert config["formatter"] == "builtin"
    assert config["prune_imports"] is True


def test_user_file_with_comments_and_overrides(tmp_path):
    user = tmp_path / "ifacemaker.jsonc"
    user.write_text(
        """
        {
            // generated code lives next to the store
            "struct": "Store",
            "copy_docs": false,
            "files": "store.go"
        }
        """
    )

    config = ConfigurationManager().load_config(
        str(user), {"iface": "StoreIface", "pkg": "store", "struct": None}
    )

    assert config["struct"] == "Store"
    assert config["copy_docs"] is False
    assert config["files"] == ["store.go"]
    assert config["iface"] == "StoreIface"


def test_defaults_file_location(tmp_path):
    (tmp_path / "defaults.json").write_text(json.dumps({"formatter": "none"}))

    config = ConfigurationManager(base_path=tmp_path).load_config(None, dict(REQUIRED))

    assert config["formatter"] == "none"


def test_missing_required_option():
    with pytest.raises(ConfigError, match="iface"):
        ConfigurationManager().load_config(None, {**REQUIRED, "iface": None})


def test_missing_or_broken_config_file(tmp_path):
    with pytest.raises(ConfigError):
        ConfigurationManager().load_config(str(tmp_path / "absent.jsonc"), dict(REQUIRED))

    broken = tmp_path / "broken.jsonc"
    broken.write_text("{ not json")
    with pytest.raises(ConfigError):
        ConfigurationManager().load_config(str(broken), dict(REQUIRED))


def test_output_location(tmp_path):
    options = ConfigurationManager.build_options(
        {**REQUIRED, "output": str(tmp_path / "gen" / "iface.go")}
    )
    assert options.output_dir == (tmp_path / "gen").resolve()

    options = ConfigurationManager.build_options(
        {**REQUIRED, "output": str(tmp_path / "gen" / "iface.go"), "pkg_dir": str(tmp_path)}
    )
    assert options.output_dir == tmp_path.resolve()

    assert ConfigurationManager.build_options(dict(REQUIRED)).output_dir is None
