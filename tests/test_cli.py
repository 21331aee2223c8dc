"""Tests for CLI entry point."""

import json

from click.testing import CliRunner

from ploteq import __version__
from ploteq.cli import main


class TestCLI:
    def test_version_flag(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_classify_text(self):
        runner = CliRunner()
        result = runner.invoke(main, ["classify", "y=sin(x)"])
        assert result.exit_code == 0, result.output
        assert "Coordinate system: CARTESIAN" in result.output
        assert "Variables used: ONE" in result.output
        assert "Canonical expression: sin(x)+0*x" in result.output

    def test_classify_json(self):
        runner = CliRunner()
        result = runner.invoke(main, ["classify", "r=theta", "-d", "3", "--format", "json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["coordinate_system"] == "spherical"
        assert payload["variables_used"] == "one_three"
        assert payload["independent_vars"] == ["theta", "phi"]
        assert payload["dimension"] == 3

    def test_classify_failure(self):
        runner = CliRunner()
        result = runner.invoke(main, ["classify", "y=5"])
        assert result.exit_code != 0
        assert "Error" in result.output

    def test_classify_bad_dimension(self):
        runner = CliRunner()
        result = runner.invoke(main, ["classify", "y=x", "-d", "4"])
        assert result.exit_code != 0

    def test_plot_success(self, surface_plot_yaml, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "saddle.plot.yaml"
        input_file.write_text(surface_plot_yaml)
        output_file = tmp_path / "out.glb"
        result = runner.invoke(main, ["plot", str(input_file), "-o", str(output_file)])
        assert result.exit_code == 0, result.output
        assert output_file.exists()
        assert output_file.read_bytes()[:4] == b"glTF"
        assert "Wrote" in result.output

    def test_plot_default_output_path(self, curve_plot_yaml, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "sine.plot.yaml"
        input_file.write_text(curve_plot_yaml)
        result = runner.invoke(main, ["plot", str(input_file)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "sine.glb").exists()

    def test_plot_with_workers(self, surface_plot_yaml, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "saddle.yaml"
        input_file.write_text(surface_plot_yaml)
        result = runner.invoke(main, ["plot", str(input_file), "--workers", "2"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "saddle.glb").exists()

    def test_missing_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["plot", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0

    def test_invalid_document(self, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "bad.plot.yaml"
        input_file.write_text("version: '1.0'\n")
        result = runner.invoke(main, ["plot", str(input_file)])
        assert result.exit_code != 0
        assert "Error" in result.output

    def test_invalid_equation(self, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "bad.plot.yaml"
        input_file.write_text('version: "0.1"\nexpression: "y=q"\nbounds: [[0, 1]]\n')
        result = runner.invoke(main, ["plot", str(input_file)])
        assert result.exit_code != 0
        assert "No coordinate system" in result.output

    def test_warn_as_error(self, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "rand.plot.yaml"
        input_file.write_text('version: "0.1"\nexpression: "y=random(x)"\nbounds: [[0, 1]]\n')
        result = runner.invoke(main, ["plot", str(input_file), "--warn-as-error", "W03"])
        assert result.exit_code != 0
        assert "W03" in result.output

    def test_unknown_warning_code(self, curve_plot_yaml, tmp_path):
        runner = CliRunner()
        input_file = tmp_path / "sine.plot.yaml"
        input_file.write_text(curve_plot_yaml)
        result = runner.invoke(main, ["plot", str(input_file), "--suppress-warning", "W99"])
        assert result.exit_code != 0
        assert "Unknown warning code" in result.output

    def test_verbose_logging(self):
        runner = CliRunner()
        result = runner.invoke(main, ["-v", "classify", "z=x*y", "-d", "3"])
        assert result.exit_code == 0, result.output
