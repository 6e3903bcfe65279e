"""Tests for the label-authz command line."""

import json
from pathlib import Path

from rich.tree import Tree
from typer.testing import CliRunner

from label_authz import __version__
from label_authz.__main__ import EXIT_DENIED, EXIT_INVALID, _add_branch, app
from label_authz.expression import parse

runner = CliRunner()


class TestCheckCommand:
    """Tests for `label-authz check`."""

    def test_allow(self) -> None:
        """Test an allowed check exits 0."""
        result = runner.invoke(app, ["check", "label1&(label2 | label3)", "--auth", "label1,label3"])
        assert result.exit_code == 0
        assert "ALLOW" in result.output

    def test_deny(self) -> None:
        """Test a denied check exits with EXIT_DENIED."""
        result = runner.invoke(app, ["check", "(label2 & label3)", "--auth", "label2"])
        assert result.exit_code == EXIT_DENIED
        assert "DENY" in result.output

    def test_invalid_expression(self) -> None:
        """Test an invalid expression exits with EXIT_INVALID."""
        result = runner.invoke(app, ["check", "(a & b", "--auth", "a,b"])
        assert result.exit_code == EXIT_INVALID
        assert "mismatched parentheses" in result.output

    def test_strict_labels(self) -> None:
        """Test --strict rejects empty authorization items."""
        result = runner.invoke(app, ["check", "a", "--auth", "a,,b", "--strict"])
        assert result.exit_code == EXIT_INVALID
        assert "empty authorization label" in result.output

        result = runner.invoke(app, ["check", "a", "--auth", "a,,b"])
        assert result.exit_code == 0


class TestParseCommand:
    """Tests for `label-authz parse`."""

    def test_tree(self) -> None:
        """Test the tree view names operators and labels."""
        result = runner.invoke(app, ["parse", 'admin | (staff & "team lead")'])
        assert result.exit_code == 0
        assert "OR" in result.output
        assert "AND" in result.output
        assert "team lead" in result.output

    def test_json(self) -> None:
        """Test --json prints the canonical text and the tree."""
        result = runner.invoke(app, ["parse", "a & (b | c)", "--json"])
        assert result.exit_code == 0

        payload = json.loads(result.output)
        assert payload["expression"] == "(b | c) & a"
        assert payload["tree"]["type"] == "and"
        assert payload["tree"]["children"][1] == {"type": "access_token", "label": "a"}

    def test_deep_tree_branches(self) -> None:
        """Test the tree view is built for expressions nested 2000 deep."""
        depth = 2000
        root = Tree("root")
        _add_branch(root, parse("(" * depth + "a | b" + ") | c" * depth))

        branch = root.children[0]
        for _ in range(depth):
            assert branch.label == "[bold]OR[/bold]"
            assert branch.children[1].label == "[cyan]c[/cyan]"
            branch = branch.children[0]

        assert [child.label for child in branch.children] == [
            "[cyan]a[/cyan]",
            "[cyan]b[/cyan]",
        ]

    def test_invalid(self) -> None:
        """Test a lexer error is reported with its position."""
        result = runner.invoke(app, ["parse", "a ! b"])
        assert result.exit_code == EXIT_INVALID
        assert "position 2" in result.output


class TestPoliciesCommand:
    """Tests for `label-authz policies`."""

    def test_table(self, policy_config_path: Path) -> None:
        """Test every policy appears with its result."""
        result = runner.invoke(
            app,
            ["policies", "--config", str(policy_config_path), "--auth", 'staff,"team lead"'],
        )
        assert result.exit_code == 0
        assert "admin_only" in result.output
        assert "reviewer" in result.output
        assert "ALLOW" in result.output
        assert "DENY" in result.output

    def test_strict_from_config(self, policy_config_path: Path) -> None:
        """Test labels.strict from the config is honored."""
        result = runner.invoke(
            app, ["policies", "--config", str(policy_config_path), "--auth", "a,,b"]
        )
        assert result.exit_code == EXIT_INVALID

    def test_missing_config(self, tmp_path: Path) -> None:
        """Test a missing config file is reported."""
        result = runner.invoke(
            app, ["policies", "--config", str(tmp_path / "nope.yaml"), "--auth", "a"]
        )
        assert result.exit_code == EXIT_INVALID
        assert "not found" in result.output

    def test_invalid_policy(self, tmp_path: Path) -> None:
        """Test a config with an unparseable policy is rejected."""
        path = tmp_path / "bad.yaml"
        path.write_text('policies:\n  broken: "(a"\n')

        result = runner.invoke(app, ["policies", "--config", str(path), "--auth", "a"])
        assert result.exit_code == EXIT_INVALID
        assert "broken" in result.output

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Test a file that is not valid YAML is reported as invalid input."""
        path = tmp_path / "broken.yaml"
        path.write_text("policies: [unclosed\n")

        result = runner.invoke(app, ["policies", "--config", str(path), "--auth", "a"])
        assert result.exit_code == EXIT_INVALID
        assert "invalid YAML" in result.output

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        """Test a YAML list or scalar at the top level is rejected."""
        for content in ("- admin\n- staff\n", "just a string\n"):
            path = tmp_path / "list.yaml"
            path.write_text(content)

            result = runner.invoke(
                app, ["policies", "--config", str(path), "--auth", "a"]
            )
            assert result.exit_code == EXIT_INVALID
            assert "must contain a mapping" in result.output

    def test_logging_level_from_config(self, tmp_path: Path) -> None:
        """
        Test the config's logging section controls policy logging.

        This test verifies:
        - logging.level ERROR hides the info-level policies_loaded event
        - logging.level INFO shows it
        - --debug on the command line wins over the config
        """
        quiet = tmp_path / "quiet.yaml"
        quiet.write_text("logging:\n  level: ERROR\npolicies:\n  admin_only: admin\n")
        loud = tmp_path / "loud.yaml"
        loud.write_text("logging:\n  level: INFO\npolicies:\n  admin_only: admin\n")

        result = runner.invoke(app, ["policies", "--config", str(quiet), "--auth", "admin"])
        assert result.exit_code == 0
        assert "policies_loaded" not in result.output

        result = runner.invoke(app, ["policies", "--config", str(loud), "--auth", "admin"])
        assert result.exit_code == 0
        assert "policies_loaded" in result.output

        result = runner.invoke(
            app, ["--debug", "policies", "--config", str(quiet), "--auth", "admin"]
        )
        assert result.exit_code == 0
        assert "policies_loaded" in result.output


def test_version() -> None:
    """Test the version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
