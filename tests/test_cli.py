"""CLI tests through typer's CliRunner."""
import pytest
from typer.testing import CliRunner

from react_jitter.analyzer.location import compute_id
from react_jitter.config import __version__
from react_jitter.main import app

runner = CliRunner()


@pytest.fixture
def app_dir(fixtures_dir):
    return fixtures_dir / 'app'


class TestTransformCommand:

    def test_single_file_to_stdout(self, app_dir):
        result = runner.invoke(app, ["transform", str(app_dir / "hooks.ts"), "--root", str(app_dir)])
        assert result.exit_code == 0, result.output
        assert 'const h = useJitterScope({ name: "useTotal"' in result.output
        assert 'file: "hooks.ts"' in result.output

    def test_ignore_hook_option(self, app_dir):
        result = runner.invoke(app, [
            "transform", str(app_dir / "hooks.ts"), "--root", str(app_dir), "--ignore-hook", "useCache",
        ])
        assert result.exit_code == 0, result.output
        assert "h.e(useCache" not in result.output
        assert "useCache(api)" in result.output

    def test_include_arguments_option(self, app_dir):
        result = runner.invoke(app, [
            "transform", str(app_dir / "hooks.ts"), "--root", str(app_dir), "--include-arguments",
        ])
        assert result.exit_code == 0, result.output
        assert 'arguments: ["api"]' in result.output

    def test_check_reports_changes(self, app_dir):
        result = runner.invoke(app, ["transform", str(app_dir), "--check", "--root", str(app_dir)])
        assert result.exit_code == 1
        assert "hooks.ts" in result.output
        assert "FieldForm.tsx" in result.output
        assert "plain.js" not in result.output
        assert "widget" not in result.output

    def test_check_clean(self, app_dir):
        result = runner.invoke(app, ["transform", str(app_dir / "plain.js"), "--check", "--root", str(app_dir)])
        assert result.exit_code == 0
        assert "Nothing to instrument" in result.output

    def test_exclude_option(self, app_dir):
        result = runner.invoke(app, [
            "transform", str(app_dir / "hooks.ts"), "--check", "--root", str(app_dir), "--exclude", "**/hooks.ts",
        ])
        assert result.exit_code == 0

    def test_out_dir(self, app_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(app, ["transform", str(app_dir), "--out-dir", str(out), "--root", str(app_dir)])
        assert result.exit_code == 0, result.output

        assert "const h = useJitterScope(" in (out / "hooks.ts").read_text(encoding="utf-8")
        assert (out / "plain.js").read_text(encoding="utf-8") == (app_dir / "plain.js").read_text(encoding="utf-8")
        assert not (out / "node_modules").exists()

    def test_several_files_need_out_dir(self, app_dir):
        result = runner.invoke(app, ["transform", str(app_dir)])
        assert result.exit_code == 2

    def test_bad_config_exits_2(self, app_dir, tmp_path):
        config = tmp_path / "jitter.config.json"
        config.write_text('{"ignoreHooks": "useCache"}', encoding="utf-8")
        result = runner.invoke(app, ["transform", str(app_dir / "hooks.ts"), "--config", str(config)])
        assert result.exit_code == 2
        assert "Error" in result.output

    def test_missing_config_exits_2(self, app_dir, tmp_path):
        result = runner.invoke(app, [
            "transform", str(app_dir / "hooks.ts"), "--config", str(tmp_path / "nope.json"),
        ])
        assert result.exit_code == 2

    def test_config_file(self, app_dir, tmp_path):
        config = tmp_path / "jitter.config.json"
        config.write_text('{"includeArguments": true}', encoding="utf-8")
        result = runner.invoke(app, [
            "transform", str(app_dir / "hooks.ts"), "--config", str(config), "--root", str(app_dir),
        ])
        assert result.exit_code == 0, result.output
        assert 'arguments: ["api"]' in result.output

    def test_unsupported_file(self, tmp_path):
        styles = tmp_path / "styles.css"
        styles.write_text("body {}", encoding="utf-8")
        result = runner.invoke(app, ["transform", str(styles)])
        assert result.exit_code == 2


class TestInspectCommand:

    def test_tables(self, app_dir):
        result = runner.invoke(app, ["inspect", str(app_dir / "FieldForm.tsx"), "--root", str(app_dir)])
        assert result.exit_code == 0, result.output
        assert "(anonymous)" in result.output
        assert "Row" in result.output
        assert "useFieldValues" in result.output
        assert "useSubmit" not in result.output

    def test_nothing_to_instrument(self, app_dir):
        result = runner.invoke(app, ["inspect", str(app_dir / "plain.js"), "--root", str(app_dir)])
        assert result.exit_code == 0
        assert "Nothing to instrument" in result.output

    def test_excluded(self, app_dir):
        result = runner.invoke(app, [
            "inspect", str(app_dir / "node_modules" / "widget" / "index.jsx"), "--root", str(app_dir),
        ])
        assert result.exit_code == 0
        assert "excluded" in result.output


class TestHashCommand:

    def test_hash(self):
        result = runner.invoke(app, ["hash", "src/Foo.tsx", "1", "7"])
        assert result.exit_code == 0
        assert result.output.strip() == compute_id("src/Foo.tsx", 1, 7)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
