"""
Tests for catalog specification and index documents.
"""

import pytest

from spex.domain.catalog import (
    CatalogEntry,
    catalog_index_document,
    parse_catalog_index,
    parse_catalog_specification,
    parse_string_list,
    unique_strings,
)
from spex.exit_codes import CONFIG_ERROR, CatalogFormatError


class TestHelpers:

    def test_unique_strings_keeps_first_occurrence(self):
        assert unique_strings(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_parse_string_list_trims_and_filters(self):
        assert parse_string_list([" a/b ", "", "  ", 3, None, "c/d"]) == ["a/b", "c/d"]

    def test_parse_string_list_non_list(self):
        assert parse_string_list("a/b") == []
        assert parse_string_list(None) == []


class TestCatalogSpecification:

    def test_valid(self):
        document = {'packages': ["myorg/adr-node", " gitlab.example.com/team/specs "]}

        assert parse_catalog_specification(document) == [
            "myorg/adr-node",
            "gitlab.example.com/team/specs",
        ]

    def test_order_is_preserved(self):
        document = {'packages': ["z/z", "a/a", "m/m"]}

        assert parse_catalog_specification(document) == ["z/z", "a/a", "m/m"]

    @pytest.mark.parametrize("document", [
        None,
        [],
        "packages",
        {},
        {'packages': "myorg/adr-node"},
        {'packages': ["myorg/adr-node", 42]},
        {'packages': ["myorg/adr-node", {'id': "a/b"}]},
        {'packages': ["myorg/adr-node", "   "]},
    ])
    def test_invalid(self, document):
        with pytest.raises(CatalogFormatError) as excinfo:
            parse_catalog_specification(document)

        assert excinfo.value.exit_code == CONFIG_ERROR


class TestCatalogIndex:

    def test_current_shape(self):
        document = {'packages': [
            {'id': "myorg/adr-node", 'name': "ADR Node", 'updated': 1700000000},
        ]}

        assert parse_catalog_index(document) == [
            CatalogEntry(id="myorg/adr-node", name="ADR Node", updated=1700000000),
        ]

    def test_legacy_bare_strings(self):
        document = {'packages': ["myorg/adr-node", "  ", "c/d"]}

        entries = parse_catalog_index(document)

        assert [e.id for e in entries] == ["myorg/adr-node", "c/d"]
        assert entries[0].name == "myorg/adr-node"
        assert entries[0].updated == 0

    def test_mixed_shapes(self):
        document = {'packages': [
            "a/b",
            {'id': "c/d", 'name': "C D", 'updated': 5},
        ]}

        assert [e.id for e in parse_catalog_index(document)] == ["a/b", "c/d"]

    def test_missing_name_and_bad_updated_fall_back(self):
        document = {'packages': [
            {'id': "a/b"},
            {'id': "c/d", 'name': "  ", 'updated': "yesterday"},
            {'id': "e/f", 'updated': True},
        ]}

        entries = parse_catalog_index(document)

        assert [e.name for e in entries] == ["a/b", "c/d", "e/f"]
        assert [e.updated for e in entries] == [0, 0, 0]

    def test_duplicates_keep_first(self):
        document = {'packages': [
            {'id': "a/b", 'name': "First"},
            "a/b",
            {'id': " a/b ", 'name': "Third"},
        ]}

        entries = parse_catalog_index(document)

        assert len(entries) == 1
        assert entries[0].name == "First"

    @pytest.mark.parametrize("document", [
        None,
        {},
        {'packages': {"a/b": {}}},
        {'packages': [42]},
        {'packages': [{'name': "no id"}]},
        {'packages': [{'id': "   "}]},
        {'packages': [["a/b"]]},
    ])
    def test_invalid(self, document):
        with pytest.raises(CatalogFormatError):
            parse_catalog_index(document)


class TestCatalogIndexDocument:

    def test_writers_emit_object_shape(self):
        entries = [
            CatalogEntry(id="a/b", name="A B", updated=10),
            CatalogEntry(id="c/d", name="c/d"),
        ]

        assert catalog_index_document(entries) == {'packages': [
            {'id': "a/b", 'name': "A B", 'updated': 10},
            {'id': "c/d", 'name': "c/d", 'updated': 0},
        ]}

    def test_written_document_reads_back(self):
        entries = [CatalogEntry(id="a/b", name="A B", updated=10)]

        assert parse_catalog_index(catalog_index_document(entries)) == entries
