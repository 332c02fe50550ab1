"""
Tests for the ksrepl command-line tool.
"""

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from kscope import __version__
from kscope.cli.errors import ExitCode, handle_cli_exception
from kscope.cli.ksrepl import main, parse_operator_options
from kscope.frontend.parser import max_depth_limit


PROGRAM = """\
# doubles its argument
def double(x) x * 2;
extern sin(a);
double(4) + 1;
"""


def invoke(args, source=PROGRAM, stdin=None):
    """Run ksrepl on `source` written to prog.ks, appending it to `args`."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        if stdin is None:
            Path("prog.ks").write_text(source)
            args = [*args, "prog.ks"]
        return runner.invoke(main, args, input=stdin)


# =============================================================================
# Input Tests
# =============================================================================

class TestInput:
    """Tests for file and stdin input."""

    def test_file_input(self):
        """Should report one status line per construct."""
        result = invoke([])

        assert result.exit_code == 0, result.output
        assert "Parsed a function definition." in result.output
        assert "Parsed an extern" in result.output
        assert "Parsed a top-level expr" in result.output

    def test_stdin_input(self):
        """Should read standard input when no file is given."""
        result = invoke([], stdin="extern cos(x);\n")

        assert result.exit_code == 0, result.output
        assert "Parsed an extern" in result.output

    def test_no_prompt_for_piped_stdin(self):
        """A non-interactive stdin gets no prompt by default."""
        result = invoke([], stdin="1;\n")
        assert "ready>" not in result.output

    def test_forced_prompt(self):
        """--prompt shows the prompt before every read."""
        result = invoke(["--prompt"], stdin="1;\n")

        assert result.exit_code == 0
        assert result.output.startswith("ready> ")
        assert result.output.count("ready> ") == 3

    def test_dash_reads_stdin(self):
        """'-' as INPUT_FILE selects standard input."""
        result = CliRunner().invoke(main, ["-"], input="x )\n")

        assert result.exit_code == 0, result.output
        assert "Parsed a top-level expr" in result.output
        assert "<stdin>:1:3: error:" in result.output

    def test_missing_file(self):
        """A nonexistent input file is a usage error."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["missing.ks"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Output Tests
# =============================================================================

class TestOutput:
    """Tests for --ast output and diagnostics."""

    def test_ast_dump(self):
        """--ast prints the tree of every parsed construct."""
        result = invoke(["--ast"])

        assert result.exit_code == 0, result.output
        assert "Function: double(x)\n  Binary: *\n    Variable: x\n    Number: 2" in result.output
        assert "Prototype: sin(a)" in result.output
        assert "Function: <anonymous>()\n  Binary: +\n    Call: double" in result.output

    def test_ast_dump_of_long_chain(self):
        """A 3000-term sum is printed, not reported as an internal error."""
        result = invoke(["--ast"], source="1" + " + 1" * 3000 + ";\n")

        assert result.exit_code == ExitCode.SUCCESS, result.output[-200:]
        assert "Internal error" not in result.output
        assert "Parsed a top-level expr" in result.output
        assert result.output.count("Number: 1") == 3001

    def test_ast_numbers_keep_precision(self):
        result = invoke(["--ast"], source="1234567 * 0.1\n")
        assert "Number: 1234567\n" in result.output
        assert "Number: 0.1\n" in result.output

    def test_no_ast_by_default(self):
        result = invoke([])
        assert "Function:" not in result.output

    def test_syntax_error_reported(self):
        """Errors are reported and parsing continues."""
        result = invoke([], source="f(1,;\n2;\n")

        assert result.exit_code == 0
        assert "prog.ks:1:5: error: unknown token ';' when expecting an expression" in result.output
        assert "Parsed a top-level expr" in result.output

    def test_verbose_diagnostic_shows_source(self):
        """-v prints the full diagnostic with the caret line."""
        result = invoke(["-v"], source="1 + )\n")

        assert "    1 + )" in result.output
        assert "        ^" in result.output
        assert "hint:" in result.output


# =============================================================================
# Option Tests
# =============================================================================

class TestOptions:
    """Tests for --op, --max-depth and --strict."""

    def test_install_operator(self):
        """--op adds a binary operator."""
        result = invoke(["--op", "/=40", "--ast"], source="a + b / c\n")

        assert result.exit_code == 0, result.output
        assert "  Binary: +\n    Variable: a\n    Binary: /" in result.output

    def test_override_precedence(self):
        """--op can change an existing operator's precedence."""
        result = invoke(["--op", "+=50", "--ast"], source="a * b + c\n")

        assert result.exit_code == 0, result.output
        assert "  Binary: *\n    Variable: a\n    Binary: +" in result.output

    def test_disable_operator(self):
        """A precedence of 0 stops '<' being an operator."""
        result = invoke(["--op", "<=0"], source="a < b\n")
        assert "unknown token '<' when expecting an expression" in result.output

    @pytest.mark.parametrize("entry", ["+", "ab=3", "+=x", "=5"])
    def test_bad_operator_option(self, entry):
        result = invoke(["--op", entry])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_max_depth(self):
        result = invoke(["--max-depth", "2"], source="(((1)))\n")
        assert "expression nesting exceeds the limit of 2" in result.output

    def test_max_depth_must_be_positive(self):
        result = invoke(["--max-depth", "0"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_max_depth_capped(self):
        """Depths the interpreter stack cannot hold are rejected up front."""
        result = invoke(["--max-depth", str(max_depth_limit() + 1)])
        assert result.exit_code == ExitCode.INVALID_ARGS

        result = invoke(["--max-depth", str(max_depth_limit())], source="((1))\n")
        assert result.exit_code == ExitCode.SUCCESS

    def test_strict_failure(self):
        """--strict exits with status 1 when a construct failed."""
        result = invoke(["--strict"], source=") 1;\n")

        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "1 construct failed to parse" in result.output

    def test_strict_counts_every_failure(self):
        result = invoke(["--strict"], source=") 1; ) (\n")

        assert result.exit_code == ExitCode.SYNTAX_ERROR
        assert "3 constructs failed to parse" in result.output

    def test_strict_success(self):
        result = invoke(["--strict"])
        assert result.exit_code == ExitCode.SUCCESS

    def test_errors_without_strict_exit_zero(self):
        result = invoke([], source=") )\n")
        assert result.exit_code == ExitCode.SUCCESS


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Tests for option parsing and error handling helpers."""

    def test_parse_operator_options(self):
        table = parse_operator_options(None, None, ("/=40", "==5", "<=-1"))
        assert table == {"/": 40, "=": 5, "<": -1}

    def test_parse_operator_options_rejects_long_operator(self):
        with pytest.raises(click.BadParameter):
            parse_operator_options(None, None, ("<==10",))

    def test_handle_unreadable_input(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(PermissionError("denied"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS
        assert "denied" in capsys.readouterr().err

    def test_handle_internal_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(RuntimeError("boom"))
        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
