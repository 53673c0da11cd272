"""
Tests for the project document inventory.
"""

from pathlib import Path

import pytest

from backend.planflow.gate import Allowed, Blocked, WorkflowGate
from backend.planflow.inventory import (
    detect_platform,
    discover_bindings,
    parse_platform,
    scan_documents,
)
from backend.planflow.models import Platform


def write(root: Path, relative: str, content: str = "# doc\n") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestScanDocuments:
    """Tests for scan_documents."""

    def test_missing_root(self, tmp_path):
        """Test a missing root yields no documents."""
        assert scan_documents(tmp_path / "missing") == frozenset()

    def test_files_and_directories(self, tmp_path):
        """Test files are listed by path and directories with a slash."""
        write(tmp_path, "product/product-overview.md")
        write(tmp_path, "product/sections/billing/spec.md")
        documents = scan_documents(tmp_path)
        assert "product/product-overview.md" in documents
        assert "product/sections/billing/spec.md" in documents
        assert "product/" in documents
        assert "product/sections/billing/" in documents

    def test_hidden_entries_skipped(self, tmp_path):
        """Test hidden files and directories are ignored."""
        write(tmp_path, ".git/config")
        write(tmp_path, "product/.draft.md")
        write(tmp_path, "product/product-roadmap.md")
        documents = scan_documents(tmp_path)
        assert documents == frozenset({"product/", "product/product-roadmap.md"})

    def test_empty_directory_counts(self, tmp_path):
        """Test an empty export directory is still present."""
        (tmp_path / "product-plan").mkdir()
        assert "product-plan/" in scan_documents(tmp_path)

    def test_accepts_string_root(self, tmp_path):
        """Test the root may be a string."""
        write(tmp_path, "a.md")
        assert scan_documents(str(tmp_path)) == frozenset({"a.md"})

    def test_snapshot_feeds_gate(self, tmp_path):
        """Test a scanned snapshot drives gate decisions."""
        gate = WorkflowGate()
        write(tmp_path, "product/product-overview.md")
        assert gate.can_run("data-model", scan_documents(tmp_path), "web") == Blocked(
            ["product/product-roadmap.md"]
        )
        write(tmp_path, "product/product-roadmap.md")
        assert gate.can_run("data-model", scan_documents(tmp_path), "web") == Allowed()


class TestPlatformDetection:
    """Tests for reading the platform from the product overview."""

    @pytest.mark.parametrize("line,expected", [
        ("Platform: iOS", Platform.IOS),
        ("**Platform:** web", Platform.WEB),
        ("- **Platform**: CLI", Platform.CLI),
        ("## Platform: TUI", Platform.TUI),
        ("Target platform: macOS-native", Platform.MACOS),
        ("platform: `API/backend`", Platform.API),
        ("Platform: cross-platform-desktop", Platform.DESKTOP),
    ])
    def test_parse_platform(self, line, expected):
        """Test the platform line formats."""
        text = f"# Product Overview\n\nA tool.\n\n{line}\n\n## Users\n"
        assert parse_platform(text) is expected

    def test_no_platform_line(self):
        """Test text without a platform line."""
        assert parse_platform("# Product Overview\n\nNo platform yet.\n") is Platform.UNSET

    def test_platform_value_on_next_line_ignored(self):
        """Test the value must be on the same line."""
        assert parse_platform("Platform:\nweb\n") is Platform.UNSET

    def test_unrecognized_platform(self, caplog):
        """Test an unknown value logs a warning and stays unset."""
        with caplog.at_level("WARNING"):
            assert parse_platform("Platform: Amiga\n") is Platform.UNSET
        assert "Amiga" in caplog.text

    def test_detect_platform(self, tmp_path):
        """Test detection from the overview document."""
        assert detect_platform(tmp_path) is Platform.UNSET
        write(tmp_path, "product/product-overview.md", "# Overview\n\n**Platform:** iOS\n")
        assert detect_platform(tmp_path) is Platform.IOS


class TestDiscoverBindings:
    """Tests for discover_bindings."""

    def test_sections_and_domains(self):
        """Test section ids and architecture domains are discovered."""
        documents = {
            "product/sections/reports/spec.md",
            "product/sections/billing/spec.md",
            "product/sections/billing/data.json",
            "product/sections/drafts/notes.md",
            "product/architecture/overview.md",
            "product/architecture/payments.md",
            "product/architecture/auth.md",
        }
        assert discover_bindings(documents) == {
            "id": ["billing", "reports"],
            "domain": ["auth", "payments"],
        }

    def test_empty(self):
        """Test no documents give empty bindings."""
        assert discover_bindings([]) == {"id": [], "domain": []}
