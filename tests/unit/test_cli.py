"""Tests for the command-line interface."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from persona_rag.cli import app
from persona_rag.config.settings import Settings
from persona_rag.core.exceptions import VectorIndexError
from persona_rag.models.knowledge import CollectionStats

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_settings(test_settings: Settings):
    """Commands run with test settings and leave global logging alone."""
    with patch("persona_rag.cli._load_settings", return_value=test_settings), \
            patch("persona_rag.cli.setup_logging"):
        yield test_settings


@pytest.fixture
def mock_index():
    """Vector index used by index-only commands."""
    index = MagicMock()
    index.initialize = AsyncMock()
    index.close = AsyncMock()
    index.delete_collection = AsyncMock(return_value=True)
    index.collection_stats = AsyncMock(
        return_value=CollectionStats(
            namespace="persona_42", exists=True, point_count=3, dimension=8, distance="cosine"
        )
    )
    with patch("persona_rag.cli.VectorIndex", return_value=index):
        yield index


@pytest.fixture
def mock_pipeline_class():
    with patch("persona_rag.cli.RAGPipeline") as pipeline_class:
        yield pipeline_class


class TestForgetCommand:
    """Test dropping a persona's knowledge."""

    def test_forget_uses_index_only(self, mock_index, mock_pipeline_class):
        """Forgetting needs neither the embedding nor the generation service."""
        result = runner.invoke(app, ["forget", "42"])

        assert result.exit_code == 0
        assert "Dropped persona_42" in result.output
        mock_index.initialize.assert_awaited_once()
        mock_index.delete_collection.assert_awaited_once_with("persona_42")
        mock_index.close.assert_awaited_once()
        mock_pipeline_class.assert_not_called()

    def test_forget_missing_namespace(self, mock_index):
        mock_index.delete_collection.return_value = False

        result = runner.invoke(app, ["forget", "42"])

        assert result.exit_code == 0
        assert "No knowledge stored in persona_42" in result.output

    def test_forget_explicit_namespace(self, mock_index):
        result = runner.invoke(app, ["forget", "42", "--namespace", "custom_ns"])

        assert result.exit_code == 0
        mock_index.delete_collection.assert_awaited_once_with("custom_ns")

    def test_forget_invalid_namespace(self, mock_index):
        """A malformed namespace fails before touching the index."""
        result = runner.invoke(app, ["forget", "42", "--namespace", "x"])

        assert result.exit_code == 1
        mock_index.delete_collection.assert_not_awaited()
        mock_index.close.assert_awaited_once()

    def test_forget_index_failure(self, mock_index):
        """Index errors exit with status 1 and still close the client."""
        mock_index.delete_collection.side_effect = VectorIndexError("disk full", "persona_42")

        result = runner.invoke(app, ["forget", "42"])

        assert result.exit_code == 1
        assert "disk full" in result.output
        mock_index.close.assert_awaited_once()


class TestStatsCommand:
    """Test describing a persona's knowledge."""

    def test_stats_uses_index_only(self, mock_index, mock_pipeline_class):
        result = runner.invoke(app, ["stats", "42"])

        assert result.exit_code == 0
        assert "persona_42" in result.output
        assert "cosine" in result.output
        mock_index.collection_stats.assert_awaited_once_with("persona_42")
        mock_pipeline_class.assert_not_called()


class TestChunkCommand:
    """Test the chunk preview."""

    def test_chunk_preview(self, temp_dir):
        source = temp_dir / "knowledge.txt"
        source.write_text("One. Two three. Four five six.", encoding="utf-8")

        result = runner.invoke(
            app, ["chunk", str(source), "--min-words", "1", "--max-words", "3", "--overlap", "0"]
        )

        assert result.exit_code == 0
        assert "Four five six." in result.output

    def test_chunk_rejects_bad_bounds(self, temp_dir):
        source = temp_dir / "knowledge.txt"
        source.write_text("Some text.", encoding="utf-8")

        result = runner.invoke(app, ["chunk", str(source), "--min-words", "10", "--max-words", "5"])

        assert result.exit_code == 1
