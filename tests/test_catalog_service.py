"""
Tests for catalog metadata harvesting and catalog index builds.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from conftest import requires_git
from spex.domain import event as events
from spex.domain.catalog import CatalogEntry
from spex.domain.event import drain
from spex.domain.package import parse_package_id
from spex.exit_codes import CatalogFormatError, IdentifierFormatError, RemoteOperationError
from spex.infra.git_client import GitClient, GitCommandError
from spex.infra.mirror_cache import CachedMirror
from spex.services.catalog_service import (
    CatalogBuildService,
    MetadataHarvester,
    extract_readme_title,
)


def _mirror(raw="acme/specs"):
    return CachedMirror(parse_package_id(raw), Path("/cache/acme/specs.git"), created=False)


class TestExtractReadmeTitle:

    @pytest.mark.parametrize("content,expected", [
        ("# ACME Specs\n\nBody", "ACME Specs"),
        ("\ufeff# With BOM\n", "With BOM"),
        ("Intro line\n\n#   Spaced Title   \n", "Spaced Title"),
        ("# Closed Title ##\n", "Closed Title"),
        ("  # Indented\n", "Indented"),
        ("## Second level\n# First level\n", "First level"),
        ("# C# Guidelines\n", "C# Guidelines"),
        ("```bash\n# install the tool\n```\n# Real Title\n", "Real Title"),
        ("~~~~\n# inside\n~~~\n# still inside\n~~~~\n# After Fence\n", "After Fence"),
        ("    # indented code\n   # Three Spaces\n", "Three Spaces"),
    ])
    def test_titles(self, content, expected):
        assert extract_readme_title(content) == expected

    @pytest.mark.parametrize("content", [
        "",
        "No heading at all\n",
        "## Only second level\n",
        "#NoSpace\n",
        "#\n",
        "```\n# only in code\n```\n",
        "    # four spaces is code\n",
        "```python\n# unterminated fence\n",
    ])
    def test_no_title(self, content):
        assert extract_readme_title(content) is None


class TestMetadataHarvester:

    @pytest.fixture
    def git_client(self):
        return MagicMock(spec=GitClient)

    def test_last_updated(self, git_client):
        git_client.last_commit_time.return_value = "1700000000"

        assert MetadataHarvester(git_client).last_updated(_mirror()) == 1700000000

    @pytest.mark.parametrize("output", ["", "0", "-5", "abc", "17e8"])
    def test_last_updated_rejects_unusable_output(self, git_client, output):
        git_client.last_commit_time.return_value = output

        with pytest.raises(RemoteOperationError) as excinfo:
            MetadataHarvester(git_client).last_updated(_mirror())

        assert excinfo.value.clone_url == "https://github.com/acme/specs.git"

    def test_last_updated_git_failure(self, git_client):
        git_client.last_commit_time.side_effect = GitCommandError(
            ["git", "log"], 128, stderr="fatal: your current branch does not have any commits"
        )

        with pytest.raises(RemoteOperationError) as excinfo:
            MetadataHarvester(git_client).last_updated(_mirror())

        assert "does not have any commits" in str(excinfo.value)

    def test_display_name_tries_candidates_in_order(self, git_client):
        def show_file(repo, path, revision="HEAD"):
            if path == "Readme.md":
                return "# From Readme\n"
            raise GitCommandError(["git", "show"], 128)

        git_client.show_file.side_effect = show_file

        name = MetadataHarvester(git_client).display_name(_mirror())

        assert name == "From Readme"
        tried = [c[0][1] for c in git_client.show_file.call_args_list]
        assert tried == ["README.md", "readme.md", "Readme.md"]

    def test_display_name_falls_back_to_raw_identifier(self, git_client):
        git_client.show_file.return_value = "no heading here\n"

        assert MetadataHarvester(git_client).display_name(_mirror("https://github.com/acme/specs.git")) == \
            "https://github.com/acme/specs.git"

    def test_display_name_without_readme(self, git_client):
        git_client.show_file.side_effect = GitCommandError(["git", "show"], 128)

        assert MetadataHarvester(git_client).display_name(_mirror()) == "acme/specs"

    def test_harvest(self, git_client):
        git_client.last_commit_time.return_value = "1700000000"
        git_client.show_file.return_value = "# ACME\n"

        entry = MetadataHarvester(git_client).harvest(_mirror())

        assert entry == CatalogEntry(id="acme/specs", name="ACME", updated=1700000000)


class TestCatalogBuildServiceWithMocks:

    @pytest.fixture
    def cache(self):
        cache = MagicMock()
        cache.ensure_mirror.side_effect = lambda identifier, cwd=None: CachedMirror(
            identifier, Path("/cache") / identifier.name, created=True
        )
        return cache

    @pytest.fixture
    def harvester(self):
        harvester = MagicMock(spec=MetadataHarvester)
        harvester.harvest.side_effect = lambda mirror: CatalogEntry(
            id=mirror.identifier.raw, name=mirror.identifier.name.upper(), updated=100
        )
        return harvester

    def test_builds_index_in_specification_order(self, tmp_path, cache, harvester):
        (tmp_path / "spex-catalog.yml").write_text("packages:\n  - z/zeta\n  - a/alpha\n")
        service = CatalogBuildService(cache, harvester=harvester)

        emitted = []
        gen = service.build(tmp_path)
        while True:
            try:
                emitted.append(next(gen).type)
            except StopIteration as stop:
                result = stop.value
                break

        index = yaml.safe_load((tmp_path / "spex-catalog-index.yml").read_text())
        assert index == {'packages': [
            {'id': "z/zeta", 'name': "ZETA", 'updated': 100},
            {'id': "a/alpha", 'name': "ALPHA", 'updated': 100},
        ]}
        assert [e.id for e in result.packages] == ["z/zeta", "a/alpha"]
        assert result.index_file_path == str(tmp_path.resolve() / "spex-catalog-index.yml")
        assert service.last_result is result
        assert emitted == [
            events.CATALOG_BUILD_STARTED,
            events.CATALOG_SPECIFICATION_READ,
            events.MIRROR_CLONED,
            events.CATALOG_ENTRY_HARVESTED,
            events.MIRROR_CLONED,
            events.CATALOG_ENTRY_HARVESTED,
            events.CATALOG_INDEX_WRITTEN,
            events.CATALOG_BUILD_FINISHED,
        ]

    def test_missing_specification(self, tmp_path, cache, harvester):
        with pytest.raises(CatalogFormatError):
            drain(CatalogBuildService(cache, harvester=harvester).build(tmp_path))

    def test_malformed_specification(self, tmp_path, cache, harvester):
        (tmp_path / "spex-catalog.yml").write_text("packages: a/b\n")

        with pytest.raises(CatalogFormatError):
            drain(CatalogBuildService(cache, harvester=harvester).build(tmp_path))

    def test_invalid_identifier_aborts_before_writing(self, tmp_path, cache, harvester):
        (tmp_path / "spex-catalog.yml").write_text("packages:\n  - a/b\n  - ../evil\n")

        with pytest.raises(IdentifierFormatError):
            drain(CatalogBuildService(cache, harvester=harvester).build(tmp_path))

        assert not (tmp_path / "spex-catalog-index.yml").exists()

    def test_first_harvest_failure_aborts(self, tmp_path, cache, harvester):
        (tmp_path / "spex-catalog.yml").write_text("packages:\n  - a/b\n  - c/d\n")
        harvester.harvest.side_effect = RemoteOperationError("no commits")
        service = CatalogBuildService(cache, harvester=harvester)

        with pytest.raises(RemoteOperationError):
            drain(service.build(tmp_path))

        assert cache.ensure_mirror.call_count == 1
        assert service.last_result is None
        assert not (tmp_path / "spex-catalog-index.yml").exists()


@requires_git
class TestCatalogBuildWithGit:

    def test_real_harvest(self, remotes, mirror_cache, tmp_path):
        remotes.create("acme/specs", {
            "README.md": "\ufeff# ACME Specifications\n\nShared ADRs.\n",
            "spex/adr/one.md": "# One\n",
        }, commit_time=1700000000)
        remotes.create("acme/untitled", {"README.md": "just text\n"}, commit_time=1690000000)
        catalog_dir = tmp_path / "catalog"
        catalog_dir.mkdir()
        (catalog_dir / "spex-catalog.yml").write_text(
            "packages:\n  - acme/specs\n  - https://github.com/acme/untitled.git\n"
        )

        result = drain(CatalogBuildService(mirror_cache).build(catalog_dir))

        assert result.packages == [
            CatalogEntry(id="acme/specs", name="ACME Specifications", updated=1700000000),
            CatalogEntry(id="https://github.com/acme/untitled.git",
                         name="https://github.com/acme/untitled.git", updated=1690000000),
        ]

    def test_repository_without_commits_fails(self, remotes, mirror_cache, tmp_path):
        remotes.create("acme/empty")
        catalog_dir = tmp_path / "catalog"
        catalog_dir.mkdir()
        (catalog_dir / "spex-catalog.yml").write_text("packages:\n  - acme/empty\n")

        with pytest.raises(RemoteOperationError):
            drain(CatalogBuildService(mirror_cache).build(catalog_dir))
