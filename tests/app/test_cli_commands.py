from __future__ import annotations

import json

from typer.testing import CliRunner

from wayfuzz import __version__
from wayfuzz.app import app
from wayfuzz.engine import TEXT_ERRORS
from wayfuzz.exceptions import ProtocolError

runner = CliRunner()


def _install(monkeypatch, fetcher) -> list:
    captured: list = []

    def build(settings):
        captured.append(settings)
        return fetcher

    monkeypatch.setattr("wayfuzz.app.build_fetcher", build)
    return captured


def test_cli_prints_sorted_unique_urls(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher(
        {
            "example.com": [("https://www.example.com/b", 200), ("http://example.com/a", 200)],
            "example.org": [("http://example.org/a", 200)],
        }
    )
    _install(monkeypatch, fetcher)
    result = runner.invoke(app, [], input="example.com\nexample.org\n")
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/a", "/b"]
    assert fetcher.closed


def test_cli_passes_flags_into_settings(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher(
        {
            "example.com": [
                ("http://example.com/foo/bar.png", 200),
                ("http://example.com/foo/bar/", 200),
                ("http://example.com/gone/x", 404),
            ]
        }
    )
    captured = _install(monkeypatch, fetcher)
    result = runner.invoke(
        app,
        ["-c", "3", "-x", r"\.png$", "--sed", "-s", "200,301", "--timeout", "5"],
        input="example.com\n",
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["bar", "foo"]
    settings = captured[0]
    assert settings.concurrency == 3
    assert settings.status_codes == [200, 301]
    assert settings.timeout == 5
    assert fetcher.calls == [("example.com", frozenset({200, 301}))]


def test_cli_reports_failed_domains_and_keeps_going(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher(
        {
            "bad.test": ProtocolError("archive index answered HTTP 503", domain="bad.test"),
            "good.test": [("http://good.test/ok", 200)],
        }
    )
    _install(monkeypatch, fetcher)
    result = runner.invoke(app, [], input="bad.test\ngood.test\n")
    assert result.exit_code == 0
    error_line = "Error fetching URLs for domain bad.test: archive index answered HTTP 503"
    assert error_line in result.stderr
    assert "Error fetching" not in result.stdout
    assert result.stdout.splitlines() == ["/ok"]


def test_cli_keeps_going_past_undecodable_input(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher({"example.com": [("http://example.com/a", 200)]})
    _install(monkeypatch, fetcher)
    result = runner.invoke(app, [], input=b"example.com\n\xff\xfe.com\n")
    assert result.exit_code == 0, result.output
    domains = sorted(domain.encode("utf-8", TEXT_ERRORS) for domain, _ in fetcher.calls)
    assert domains == [b"example.com", b"\xff\xfe.com"]
    assert result.stdout_bytes == b"/a\n"


def test_cli_writes_undecodable_bytes_back_unchanged(monkeypatch, fake_fetcher) -> None:
    escaped = b"http://example.com/\xff".decode("utf-8", TEXT_ERRORS)
    _install(monkeypatch, fake_fetcher({"example.com": [(escaped, 200), ("http://example.com/a", 200)]}))
    result = runner.invoke(app, [], input="example.com\n")
    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == b"/a\n/\xff\n"


def test_cli_splits_input_on_newline_only(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher({})
    _install(monkeypatch, fetcher)
    result = runner.invoke(app, [], input=b"a.test\rb.test\r\n")
    assert result.exit_code == 0, result.output
    assert [domain for domain, _ in fetcher.calls] == ["a.test\rb.test"]


def test_cli_fail_on_error_sets_exit_code(monkeypatch, fake_fetcher) -> None:
    fetcher = fake_fetcher({"bad.test": ProtocolError("nope", domain="bad.test")})
    _install(monkeypatch, fetcher)
    result = runner.invoke(app, ["--fail-on-error"], input="bad.test\n")
    assert result.exit_code == 1


def test_cli_rejects_invalid_pattern_before_fetching(monkeypatch, fake_fetcher) -> None:
    captured = _install(monkeypatch, fake_fetcher({}))
    result = runner.invoke(app, ["-x", "(["], input="example.com\n")
    assert result.exit_code == 2
    assert "Configuration error" in result.output
    assert captured == []


def test_cli_writes_json_output_file(monkeypatch, fake_fetcher, tmp_path) -> None:
    fetcher = fake_fetcher({"example.com": [("http://example.com/z", 200), ("http://example.com/a", 200)]})
    _install(monkeypatch, fetcher)
    target = tmp_path / "urls.json"
    result = runner.invoke(app, ["-o", str(target), "--format", "json"], input="example.com\n")
    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8")) == ["/a", "/z"]


def test_cli_reads_config_file(monkeypatch, fake_fetcher, tmp_path) -> None:
    config = tmp_path / "wayfuzz.yaml"
    config.write_text("skip_blank_lines: true\nconcurrency: 2\n", encoding="utf-8")
    fetcher = fake_fetcher({"example.com": [("http://example.com/a", 200)]})
    captured = _install(monkeypatch, fetcher)
    result = runner.invoke(app, ["--config", str(config)], input="\nexample.com\n\n")
    assert result.exit_code == 0, result.output
    assert captured[0].concurrency == 2
    assert [domain for domain, _ in fetcher.calls] == ["example.com"]


def test_cli_stats_table(monkeypatch, fake_fetcher) -> None:
    _install(monkeypatch, fake_fetcher({"example.com": [("http://example.com/a", 200)]}))
    result = runner.invoke(app, ["--stats"], input="example.com\n")
    assert result.exit_code == 0, result.output
    assert "Unique items" in result.output


def test_cli_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
