"""
Tests for spex/render.py rendering functions.
"""
from datetime import datetime
from io import StringIO

from rich.console import Console

from spex import render
from spex.domain.catalog import CatalogEntry
from spex.services.validation_service import ValidatedType, ValidationResult


def _console():
    return Console(file=StringIO(), width=120, color_system=None)


class TestFormatUpdated:

    def test_unknown(self):
        assert render.format_updated(0) == "-"

    def test_local_time(self):
        expected = datetime.fromtimestamp(1700000000).strftime('%Y-%m-%d %H:%M')
        assert render.format_updated(1700000000) == expected


class TestRenderCatalogTable:

    def test_empty_entries_shows_message(self):
        out = _console()
        render.render_catalog_table([], target=out)
        assert "No packages available" in out.file.getvalue()

    def test_rows_are_numbered_from_one(self):
        out = _console()
        entries = [
            CatalogEntry("acme/adr", "ACME ADRs", 0),
            CatalogEntry("acme/style", "Style Guide", 1700000000),
        ]

        render.render_catalog_table(entries, title="Available packages", target=out)

        lines = out.file.getvalue().splitlines()
        adr_line = next(line for line in lines if "acme/adr" in line)
        style_line = next(line for line in lines if "acme/style" in line)
        assert " 1 " in adr_line and "ACME ADRs" in adr_line
        assert " 2 " in style_line and "Style Guide" in style_line
        assert "Available packages" in out.file.getvalue()

    def test_default_console(self, capsys):
        render.render_catalog_table([CatalogEntry("a/b", "Alpha", 0)])
        assert "Alpha" in capsys.readouterr().out


class TestRenderValidationTable:

    def test_types_and_counts(self):
        out = _console()
        result = ValidationResult("/p/spex", [
            ValidatedType("adr", "/p/spex/adr", 3),
            ValidatedType("feature", "/p/spex/feature", 1),
        ])

        render.render_validation_table(result, target=out)

        text = out.file.getvalue()
        assert "Spex Structure" in text
        assert "adr" in text and "3" in text
        assert "/p/spex/feature" in text
