"""
Tests for the command-line entry point (``docs2pdf.__main__``).

Covers:
  1. Missing required flags exit with status 1 before anything is launched
  2. Flags and environment variables reach the run config
  3. Fatal conversion errors map to exit status 1
"""

import pytest

import docs2pdf.__main__ as cli
from docs2pdf.errors import RendererLaunchError
from docs2pdf.models import ConversionResult

_ENV_VARS = (
    "DOCS2PDF_DOCS_URL",
    "DOCS2PDF_PDF_PATH",
    "DOCS2PDF_COVER_IMAGE",
    "DOCS2PDF_PAGE_CONCURRENCY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class RecordingConverter:
    """Stands in for ``DocsToPdfConverter``; records the config it got."""
    configs = []
    error = None

    def __init__(self, config, renderer=None):
        RecordingConverter.configs.append(config)

    def run(self):
        if RecordingConverter.error is not None:
            raise RecordingConverter.error
        return ConversionResult(output_path="/tmp/out.pdf", stats={"pages_total": 0})


@pytest.fixture
def converter(monkeypatch):
    RecordingConverter.configs = []
    RecordingConverter.error = None
    monkeypatch.setattr(cli, "DocsToPdfConverter", RecordingConverter)
    return RecordingConverter


class TestRequiredFlags:

    def test_no_arguments(self, converter, capsys):
        assert cli.main([]) == 1
        assert "usage:" in capsys.readouterr().err
        assert converter.configs == []

    def test_missing_pdf_path(self, converter):
        assert cli.main(["-u", "https://x/docs/intro"]) == 1
        assert converter.configs == []

    def test_invalid_concurrency(self, converter):
        assert cli.main(["-u", "https://x", "-o", "o.pdf", "-p", "0"]) == 1
        assert converter.configs == []

    def test_zero_concurrency_from_environment(self, converter, monkeypatch):
        monkeypatch.setenv("DOCS2PDF_PAGE_CONCURRENCY", "0")
        assert cli.main(["-u", "https://x", "-o", "o.pdf"]) == 1
        assert converter.configs == []


class TestConfigFromFlags:

    def test_short_flags(self, converter, capsys):
        code = cli.main([
            "-u", "https://x/docs/intro", "-o", "out.pdf", "-c", "cover.png",
            "-m", "oops", "-p", "3", "--pdf-format", "Letter",
            "--remove-selector", ".banner", "--no-headless",
        ])
        assert code == 0
        cfg = converter.configs[0]
        assert cfg.docs_url == "https://x/docs/intro"
        assert cfg.pdf_path == "out.pdf"
        assert cfg.pdf_cover_image == "cover.png"
        assert cfg.pdf_margin_mm == 10
        assert cfg.page_concurrency == 3
        assert cfg.pdf_format == "Letter"
        assert ".banner" in cfg.remove_selectors
        assert cfg.headless is False
        assert "CONVERSION COMPLETE" in capsys.readouterr().out

    def test_environment_defaults(self, converter, monkeypatch):
        monkeypatch.setenv("DOCS2PDF_DOCS_URL", "https://env/docs")
        monkeypatch.setenv("DOCS2PDF_PDF_PATH", "env.pdf")
        monkeypatch.setenv("DOCS2PDF_PAGE_CONCURRENCY", "5")
        assert cli.main([]) == 0
        cfg = converter.configs[0]
        assert (cfg.docs_url, cfg.pdf_path, cfg.page_concurrency) == ("https://env/docs", "env.pdf", 5)

    def test_flags_override_environment(self, converter, monkeypatch):
        monkeypatch.setenv("DOCS2PDF_DOCS_URL", "https://env/docs")
        assert cli.main(["--docs-url", "https://flag/docs", "--pdf-path", "o.pdf"]) == 0
        assert converter.configs[0].docs_url == "https://flag/docs"

    def test_unknown_format_rejected_by_parser(self, converter):
        with pytest.raises(SystemExit):
            cli.main(["-u", "https://x", "-o", "o.pdf", "--pdf-format", "A3"])


class TestFatalErrors:

    def test_docs2pdf_error_exits_1(self, converter):
        converter.error = RendererLaunchError("Could not launch Chromium")
        assert cli.main(["-u", "https://x", "-o", "o.pdf"]) == 1

    def test_keyboard_interrupt_exits_1(self, converter):
        converter.error = KeyboardInterrupt()
        assert cli.main(["-u", "https://x", "-o", "o.pdf"]) == 1
