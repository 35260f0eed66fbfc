"""
Tests for the command-line launcher.
"""

import pytest

from print_studio.cli import main
from print_studio.core.utils.serialization import save_report_json


class TestMain:
    """Tests for main()."""

    def test_when_report_valid_then_outputs_written(self, tmp_path, sample_report, capsys):
        # Arrange
        report_path = tmp_path / "report.json"
        save_report_json(sample_report, report_path)
        out = tmp_path / "build"

        # Act
        code = main([str(report_path), "--out", str(out), "--density", "compact"])

        # Assert
        assert code in (0, 3)
        assert (out / "report.pdf").exists()
        assert (out / "preview.html").exists()
        assert "Generated" in capsys.readouterr().out

    def test_when_report_missing_then_exit_code_one(self, tmp_path, capsys):
        # Act
        code = main([str(tmp_path / "missing.json"), "--out", str(tmp_path / "build")])

        # Assert
        assert code == 1
        assert "Failed to load report" in capsys.readouterr().err

    def test_when_density_unknown_then_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "report.json"), "--density", "cramped"])
        assert exc_info.value.code == 2
