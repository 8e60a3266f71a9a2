from pathlib import Path

import pytest

from pubserve.config import ConfigError, ServeConfig, parsePort


def test_port_defaults_to_3000():
	assert parsePort(None) == 3000
	assert parsePort("") == 3000
	assert parsePort("  ") == 3000
	assert ServeConfig.FromEnvironment({}).port == 3000


def test_port_from_environment():
	assert parsePort("8080") == 8080
	assert ServeConfig.FromEnvironment({"PORT": "8080"}).port == 8080


@pytest.mark.parametrize("value", ["http", "80.5", "-1", "65536"])
def test_invalid_port(value: str):
	with pytest.raises(ConfigError):
		parsePort(value)


def test_defaults():
	config = ServeConfig.FromEnvironment({})
	assert config.root == Path("public")
	assert config.index == "index.html"
	assert config.host == "0.0.0.0"
	assert config.logLevel == "info"
	assert config.logRequests


def test_environment_overrides():
	config = ServeConfig.FromEnvironment(
		{
			"PUBSERVE_ROOT": "/srv/www",
			"PUBSERVE_INDEX": "home.html",
			"HOST": "127.0.0.1",
			"PUBSERVE_LOG_LEVEL": "DEBUG",
			"PUBSERVE_LOG_REQUESTS": "0",
		}
	)
	assert config.root == Path("/srv/www")
	assert config.index == "home.html"
	assert config.host == "127.0.0.1"
	assert config.logLevel == "debug"
	assert not config.logRequests


def test_unknown_log_level():
	with pytest.raises(ConfigError):
		ServeConfig.FromEnvironment({"PUBSERVE_LOG_LEVEL": "chatty"})


def test_validate(public: Path, monkeypatch: pytest.MonkeyPatch):
	monkeypatch.chdir(public.parent)
	config = ServeConfig().validate()
	assert config.root == public.absolute()
	assert config.root.is_absolute()
	assert config.entry == public.absolute() / "index.html"


def test_validate_missing_entry_document(public: Path):
	(public / "index.html").unlink()
	with pytest.raises(ConfigError, match="Entry document"):
		ServeConfig(root=public).validate()


def test_validate_missing_root(tmp_path: Path):
	with pytest.raises(ConfigError, match="does not exist"):
		ServeConfig(root=tmp_path / "nope").validate()


def test_validate_root_is_a_file(public: Path):
	with pytest.raises(ConfigError, match="not a directory"):
		ServeConfig(root=public / "style.css").validate()


def test_validate_entry_is_a_directory(public: Path):
	with pytest.raises(ConfigError, match="Entry document"):
		ServeConfig(root=public, index="docs").validate()


def test_validate_entry_must_be_a_name(public: Path):
	with pytest.raises(ConfigError, match="file name"):
		ServeConfig(root=public, index="../secret.txt").validate()


# EOF
