from pathlib import Path

from clickhub.config.env_loader import load_env_file, parse_env_lines


def _write(tmp_path: Path, name: str, text: str) -> None:
    env_dir = tmp_path / ".env"
    env_dir.mkdir(exist_ok=True)
    (env_dir / f"{name}.env").write_text(text)


def test_load_valid_env_file(tmp_path: Path):
    _write(tmp_path, "local", "FINANCE_SERVICE_URL=http://finance:9000\nWEBHOOK_SECRET=s3cret\n")
    result = load_env_file("local", project_root=tmp_path)
    assert result == {"FINANCE_SERVICE_URL": "http://finance:9000", "WEBHOOK_SECRET": "s3cret"}


def test_load_missing_file_returns_empty(tmp_path: Path):
    assert load_env_file("nonexistent", project_root=tmp_path) == {}


def test_comments_blank_lines_and_export_prefix(tmp_path: Path):
    _write(tmp_path, "test", "# a comment\n\nexport LOG_IMPL=memory\n  # another\n")
    assert load_env_file("test", project_root=tmp_path) == {"LOG_IMPL": "memory"}


def test_quoted_values_are_unwrapped():
    result = parse_env_lines(["SINGLE='hello'", 'DOUBLE="world"', "BARE=\"x"])
    assert result == {"SINGLE": "hello", "DOUBLE": "world", "BARE": '"x'}


def test_value_with_equals_sign_and_malformed_lines():
    result = parse_env_lines(["URL=http://host/path?opt=1", "no_separator", "=orphan"])
    assert result == {"URL": "http://host/path?opt=1"}


def test_path_like_names_are_read_directly(tmp_path: Path):
    path = tmp_path / "custom.env"
    path.write_text("WEBHOOK_SECRET=from-path\n")
    assert load_env_file(str(path), project_root=tmp_path / "elsewhere") == {
        "WEBHOOK_SECRET": "from-path"
    }
