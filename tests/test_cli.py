import json
import pytest
from typer.testing import CliRunner
from keelson import __version__
from keelson.cli.main import COMMAND_ALIASES, app

runner = CliRunner()


def _combined_output(result) -> str:
    return f"{result.stdout}{getattr(result, 'stderr', '')}"


def _site_args(site_root, *args):
    return ["--root", str(site_root), *args]


def test_no_arguments_shows_help():
    result = runner.invoke(app, [])
    assert "status" in _combined_output(result)


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"keelson {__version__}"


def test_status_reports_site(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "status"))

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["site"] == "blog"
    assert data["framework"] == "drupal"
    assert data["version"] == "9"
    assert data["databases"] == ["default"]


def test_status_alias_matches_command(site_root, outside_dir):
    full = runner.invoke(app, _site_args(site_root, "status"))
    short = runner.invoke(app, _site_args(site_root, "st"))

    assert short.exit_code == 0
    assert short.stdout == full.stdout


def test_status_outside_site(outside_dir):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["site"] is None
    assert data["framework"] == "site"


def test_unknown_alias_fails(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "--alias", "@nowhere", "status"))

    assert result.exit_code == 1
    assert "Site alias '@nowhere' not found" in _combined_output(result)


def test_site_aliases_lists_and_resolves(site_root, outside_dir):
    listing = runner.invoke(app, _site_args(site_root, "site-aliases"), env={"COLUMNS": "200"})
    single = runner.invoke(app, _site_args(site_root, "sa", "@prod"))

    assert listing.exit_code == 0
    assert "@prodserver" in listing.stdout
    assert "@staging" in listing.stdout
    assert single.exit_code == 0
    assert json.loads(single.stdout)["name"] == "prodserver"


def test_site_aliases_without_configuration(outside_dir):
    result = runner.invoke(app, ["site-aliases"])

    assert result.exit_code == 0
    assert "No site aliases configured" in _combined_output(result)


def test_config_get(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "config-get", "mail.sender"))
    missing = runner.invoke(app, _site_args(site_root, "cget", "mail.nope"))

    assert result.exit_code == 0
    assert result.stdout.strip() == "ops@example.com"
    assert missing.exit_code == 1
    assert "Config key 'mail.nope' not found" in _combined_output(missing)


def test_sql_query(site_root, outside_dir):
    created = runner.invoke(app, _site_args(site_root, "sql-query", "create table node (nid integer)"))
    inserted = runner.invoke(app, _site_args(site_root, "sqlq", "insert into node (nid) values (7)"))
    selected = runner.invoke(app, _site_args(site_root, "sql-query", "select nid from node"))

    assert created.exit_code == 0
    assert json.loads(inserted.stdout) == {"rows_affected": 1}
    assert json.loads(selected.stdout) == [{"nid": 7}]
    assert (site_root / "site.db").exists()


def test_sql_query_errors(site_root, outside_dir):
    bad_sql = runner.invoke(app, _site_args(site_root, "sql-query", "select * from missing_table"))
    bad_db = runner.invoke(app, _site_args(site_root, "sql-query", "select 1", "--database", "legacy"))

    assert bad_sql.exit_code == 1
    assert "Query failed" in _combined_output(bad_sql)
    assert bad_db.exit_code == 1
    assert "Database connection 'legacy' not found" in _combined_output(bad_db)


def test_cache_clear(site_root, outside_dir, cache_dir):
    (cache_dir / "shell").mkdir(parents=True)
    (cache_dir / "shell" / "drupal-9").write_text("history")
    (cache_dir / "render").mkdir()

    single = runner.invoke(app, _site_args(site_root, "cache-clear", "shell"))
    assert single.exit_code == 0
    assert not (cache_dir / "shell").exists()
    assert (cache_dir / "render").exists()

    everything = runner.invoke(app, _site_args(site_root, "cc"))
    assert everything.exit_code == 0
    assert list(cache_dir.iterdir()) == []


def test_cache_clear_rejects_paths(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "cache-clear", "../site"))

    assert result.exit_code == 1
    assert "Invalid cache bin" in _combined_output(result)
    assert site_root.exists()


def test_eval(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "eval", "site.site.name"))
    failed = runner.invoke(app, _site_args(site_root, "ev", "1 / 0"))

    assert result.exit_code == 0
    assert result.stdout.strip() == "blog"
    assert failed.exit_code == 1
    assert "Evaluation failed" in _combined_output(failed)


def test_docs_shell_is_hidden_but_available():
    listing = runner.invoke(app, ["--help"])
    result = runner.invoke(app, ["docs-shell"])

    assert "docs-shell" not in listing.stdout
    assert result.exit_code == 0
    assert "# Keelson shell" in result.stdout


def test_command_aliases_are_recorded():
    assert COMMAND_ALIASES["cache-clear"] == ("cc",)
    assert COMMAND_ALIASES["shell"] == ("repl",)


def test_shell_runs_python_and_commands(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "shell"), input="x = 40 + 2\nx\nst\n")

    assert result.exit_code == 0
    assert "42" in result.stdout
    assert '"site": "blog"' in result.stdout
    assert "Keelson shell on blog (drupal 9)" in _combined_output(result)


def test_shell_exposes_site_and_callable_commands(site_root, outside_dir):
    result = runner.invoke(
        app,
        _site_args(site_root, "repl"),
        input="print(site.site.name)\nconfig_get('retries')\n",
    )

    assert result.exit_code == 0
    assert "blog" in result.stdout
    assert "3" in result.stdout


def test_shell_command_failure_keeps_session(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "shell"), input="cget mail.nope\nprint('still here')\n")

    assert result.exit_code == 0
    assert "Config key 'mail.nope' not found" in _combined_output(result)
    assert "still here" in result.stdout


@pytest.mark.parametrize("hidden", ["shell", "repl", "help"])
def test_shell_does_not_expose_excluded_commands(site_root, outside_dir, hidden):
    result = runner.invoke(app, _site_args(site_root, "shell"), input=f"print({hidden!r} in dir())\n")

    assert result.exit_code == 0
    assert "False" in result.stdout


def test_shell_verbose_reports_history(site_root, outside_dir):
    result = runner.invoke(app, _site_args(site_root, "--verbose", "shell"), input="")

    assert result.exit_code == 0
    assert "History:" in _combined_output(result)


def test_shell_version_history_creates_cache_bin(site_root, outside_dir, cache_dir):
    result = runner.invoke(app, _site_args(site_root, "shell", "--version-history"), input="")

    assert result.exit_code == 0
    assert (cache_dir / "shell").is_dir()


def test_shell_outside_site(outside_dir):
    result = runner.invoke(app, ["shell"], input="print(site.site)\n")

    assert result.exit_code == 0
    assert "None" in result.stdout
    assert "Keelson shell on no site" in _combined_output(result)


def test_shell_rebound_alias_keeps_caches(site_root, outside_dir, cache_dir):
    (cache_dir / "render").mkdir(parents=True)
    (cache_dir / "render" / "page").write_text("cached")

    result = runner.invoke(app, _site_args(site_root, "shell"), input="cc = 5\ncc\n")

    assert result.exit_code == 0
    assert "Cleared" not in _combined_output(result)
    assert (cache_dir / "render" / "page").exists()
