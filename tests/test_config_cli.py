"""
Tests for configuration, output formatters and the command-line interface.
"""

import pytest
import argparse
import json
import os
import sys

import yaml

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cyclomatic.cli import main, create_parser
from cyclomatic.config import (
    CheckConfig, add_limit_option, create_default_config, find_config,
    load_check_config, load_config, option_name,
)
from cyclomatic.core.engine import CheckEngine
from cyclomatic.core.errors import ConfigurationError
from cyclomatic.formatters import JSONFormatter, SARIFFormatter, TextFormatter, get_formatter
from cyclomatic.logging_config import setup_logging


BRANCHY_PY = '''
def branchy(x):
    if x:
        return 1
    return 0
'''


@pytest.fixture
def project(tmp_path):
    (tmp_path / "branchy.py").write_text(BRANCHY_PY)
    return tmp_path


class TestOptionName:
    """Tests for the flag prefix convention."""

    def test_standalone(self):
        """Run on its own the option keeps its bare name."""
        assert option_name("cyclomatic", "limit") == "limit"
        assert option_name("/usr/bin/cyclomatic", "limit") == "limit"

    def test_combined_tool(self):
        """Inside another tool the option is prefixed."""
        assert option_name("vet", "limit") == "cyclomatic-limit"

    def test_add_limit_option(self):
        """The registered flag follows the convention."""
        parser = argparse.ArgumentParser()
        dest = add_limit_option(parser, "vet")
        args = parser.parse_args(["--cyclomatic-limit", "4"])
        assert getattr(args, dest) == 4


class TestConfig:
    """Tests for configuration loading."""

    def test_defaults(self):
        """The default limit is ten."""
        config = CheckConfig()
        assert config.limit == 10
        assert "vendor/**" in config.exclude_patterns
        assert config.output.format == "text"

    @pytest.mark.parametrize("limit", [-1, "10", 2.5, True])
    def test_invalid_limit(self, limit):
        """Negative or non-integer limits are rejected."""
        with pytest.raises(ConfigurationError):
            CheckConfig(limit=limit)

    def test_zero_limit_allowed(self):
        """A zero limit is valid and flags every function."""
        assert CheckConfig(limit=0).limit == 0

    def test_load_yaml(self, tmp_path):
        """Sections are flattened and alternative names mapped."""
        path = tmp_path / ".cyclomatic.yaml"
        path.write_text(
            "check:\n"
            "  limit: 5\n"
            "  exclude: ['gen/**']\n"
            "  facts: facts.json\n"
            "  unknown_key: 1\n"
            "output:\n"
            "  format: json\n"
        )
        config = load_check_config(str(path))

        assert config.limit == 5
        assert config.exclude_patterns == ["gen/**"]
        assert config.facts_path == "facts.json"
        assert config.output.format == "json"

    def test_load_json(self, tmp_path):
        """JSON files are accepted too."""
        path = tmp_path / "cyclomatic.json"
        path.write_text(json.dumps({"limit": 3}))
        assert load_check_config(str(path)).limit == 3

    def test_load_non_mapping(self, tmp_path):
        """The top level of a config file must be a mapping."""
        path = tmp_path / ".cyclomatic.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        """An explicit path that does not exist is an error."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_find_config_searches_upward(self, tmp_path):
        """A config file in a parent directory is found."""
        (tmp_path / ".cyclomatic.yml").write_text("limit: 4\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config(str(nested)) == str(tmp_path / ".cyclomatic.yml")
        assert load_check_config(start_dir=str(nested)).limit == 4

    def test_default_config_round_trip(self):
        """The generated default file loads back into the defaults."""
        data = yaml.safe_load(create_default_config())
        assert CheckConfig.from_dict(data) == CheckConfig()


class TestFormatters:
    """Tests for the output formatters."""

    @pytest.fixture
    def result(self, project):
        return CheckEngine(CheckConfig(limit=1)).check(str(project))

    def test_get_formatter(self):
        """Formatters are looked up by name."""
        assert isinstance(get_formatter("text"), TextFormatter)
        assert isinstance(get_formatter("cli"), TextFormatter)
        assert isinstance(get_formatter("JSON"), JSONFormatter)
        assert isinstance(get_formatter("sarif"), SARIFFormatter)
        with pytest.raises(ValueError):
            get_formatter("xml")

    def test_text(self, result, project):
        """Diagnostics are printed as path:line:col: message."""
        output = TextFormatter(use_color=False).format_result(result)
        path = str(project / "branchy.py")
        assert output == f"{path}:2:1: cyclomatic complexity of branchy exceeded limit 2 > 1"

    def test_text_all_and_verbose(self, result):
        """The score table and summary are optional."""
        output = TextFormatter(use_color=False, verbose=True, show_all=True).format_result(result)
        assert "Complexity by function" in output
        assert "branchy" in output
        assert "Files checked:     1" in output
        assert "Over limit:        1" in output

    def test_json(self, result):
        """JSON output carries summary, diagnostics and per-unit scores."""
        data = json.loads(JSONFormatter().format_result(result))
        assert data["summary"]["functions_checked"] == 1
        assert data["diagnostics"][0]["identity"] == "python:branchy.branchy"
        assert data["units"][0]["functions"][0]["complexity"] == 2

        trimmed = json.loads(JSONFormatter(show_all=False).format_result(result))
        assert "units" not in trimmed

        assert json.loads(result.to_json()) == data

    def test_sarif(self, result):
        """SARIF output is a single run of warning-level results."""
        data = json.loads(SARIFFormatter().format_result(result))
        assert data["version"] == "2.1.0"
        run = data["runs"][0]
        assert run["tool"]["driver"]["rules"][0]["id"] == "cyclomatic"
        (sarif_result,) = run["results"]
        assert sarif_result["level"] == "warning"
        assert sarif_result["properties"] == {"complexity": 2, "limit": 1}
        assert sarif_result["locations"][0]["physicalLocation"]["region"]["startLine"] == 2
        logical = sarif_result["locations"][0]["logicalLocations"][0]
        assert logical["fullyQualifiedName"] == "python:branchy.branchy"


class TestCLI:
    """Tests for the command-line interface."""

    def test_no_command_prints_help(self, capsys):
        """Without a command the help text is shown."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_clean_exit(self, project, capsys):
        """Nothing over the limit exits zero."""
        assert main(["check", str(project)]) == 0
        assert capsys.readouterr().out == ""

    def test_over_limit_exit(self, project, capsys):
        """A function over the limit exits one."""
        assert main(["check", str(project), "--limit", "1"]) == 1
        assert "exceeded limit 2 > 1" in capsys.readouterr().out

    def test_prefixed_limit_flag(self, project):
        """Inside a combined tool the flag carries the check's name."""
        assert main(["check", str(project), "--cyclomatic-limit", "1"], prog="vet") == 1
        with pytest.raises(SystemExit):
            create_parser("vet").parse_args(["check", "--limit", "1"])

    def test_analysis_error_exit(self, project, capsys):
        """A unit that fails analysis exits two."""
        (project / "broken.py").write_text("def broken(:\n")
        assert main(["check", str(project), "--no-color"]) == 2
        assert "error:" in capsys.readouterr().out

    def test_json_output_file(self, project, tmp_path_factory):
        """Output can be written to a file."""
        out = tmp_path_factory.mktemp("out") / "report.json"
        assert main(["check", str(project), "-f", "json", "-o", str(out), "--limit", "0"]) == 1

        data = json.loads(out.read_text())
        assert data["summary"]["total_diagnostics"] == 1
        assert data["units"][0]["file_path"].endswith("branchy.py")

    def test_config_limit_used(self, project):
        """The limit from a discovered config file applies."""
        (project / ".cyclomatic.yaml").write_text("check:\n  limit: 1\n")
        assert main(["check", str(project)]) == 1

    def test_invalid_config_exit(self, project, capsys):
        """A bad config value is reported on stderr."""
        (project / ".cyclomatic.yaml").write_text("check:\n  limit: -3\n")
        assert main(["check", str(project)]) == 2
        assert "Invalid configuration value for 'limit'" in capsys.readouterr().err

    def test_log_file(self, project, tmp_path_factory):
        """Log records also go to the requested file."""
        log_file = tmp_path_factory.mktemp("logs") / "check.log"
        assert main(["check", str(project), "-v", "--log-file", str(log_file)]) == 0

        assert "checking 1 files under" in log_file.read_text()
        setup_logging()

    def test_facts_command(self, project, tmp_path_factory, capsys):
        """Facts exported by check can be queried later."""
        facts = tmp_path_factory.mktemp("facts") / "facts.json"
        assert main(["check", str(project), "--facts", str(facts)]) == 0
        capsys.readouterr()

        assert main(["facts", "--facts", str(facts), "branchy"]) == 0
        assert capsys.readouterr().out.split() == ["2", "python:branchy.branchy"]

        assert main(["facts", "--facts", str(facts), "missing"]) == 1

    def test_facts_command_without_file(self, tmp_path, capsys):
        """Querying a fact file that does not exist fails."""
        assert main(["facts", "--facts", str(tmp_path / "absent.json")]) == 2

    def test_init(self, tmp_path, monkeypatch, capsys):
        """init writes a config file once unless forced."""
        monkeypatch.chdir(tmp_path)

        assert main(["init"]) == 0
        assert (tmp_path / ".cyclomatic.yaml").exists()
        assert load_check_config(".cyclomatic.yaml") == CheckConfig()

        assert main(["init"]) == 1
        assert main(["init", "--force"]) == 0
