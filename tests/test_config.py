"""Tests for configuration loading, argument parsing, and the CLI entry point."""

import io
import json
from pathlib import Path

import pytest

from pygit_push import (
    ConfigurationMissingError,
    NullOutputHandler,
    PushFailedError,
    PyGitPushError,
    SyncOrchestrator,
    SyncResult,
    create_argument_parser,
    load_config_file,
    load_credentials,
    main,
)
from pygit_push.cli import build_config, prompt_for_pull_request

ENV = {"GITHUB_TOKEN": "ghp_secret", "GITHUB_USERNAME": "octocat", "OPENAI_API_KEY": "sk-secret"}


class TestLoadCredentials:
    def test_all_present(self):
        credentials = load_credentials(ENV)
        assert credentials.github_token == "ghp_secret"
        assert credentials.github_username == "octocat"
        assert credentials.openai_api_key == "sk-secret"

    @pytest.mark.parametrize("variable", ["GITHUB_TOKEN", "GITHUB_USERNAME", "OPENAI_API_KEY"])
    def test_missing_variable(self, variable):
        environ = {k: v for k, v in ENV.items() if k != variable}
        with pytest.raises(ConfigurationMissingError) as excinfo:
            load_credentials(environ)
        assert excinfo.value.variable == variable

    def test_blank_counts_as_missing(self):
        with pytest.raises(ConfigurationMissingError):
            load_credentials({**ENV, "GITHUB_TOKEN": "  "})

    def test_reads_process_environment(self, monkeypatch):
        for key, value in ENV.items():
            monkeypatch.setenv(key, value)
        assert load_credentials().github_username == "octocat"


class TestArgumentParser:
    def test_push_defaults(self):
        args = create_argument_parser().parse_args(["push"])
        assert args.command == "push"
        assert args.message is None
        assert args.private is None
        assert args.verbose is None
        assert args.timeout is None

    def test_push_start_and_flags(self):
        args = create_argument_parser().parse_args(
            ["push", "start", "--private", "--debug", "--timeout", "30", "--name", "demo"]
        )
        assert args.start == "start"
        assert args.private is True
        assert args.verbose is True
        assert args.timeout == 30.0
        assert args.repo_name == "demo"

    def test_push_commit_message(self):
        args = create_argument_parser().parse_args(["push", "--commitmsg", "fix bug"])
        assert args.message == "fix bug"

    def test_pr_create(self):
        args = create_argument_parser().parse_args(["pr", "create", "--base", "develop", "--title", "T"])
        assert args.pr_command == "create"
        assert args.base_branch == "develop"
        assert args.title == "T"

    def test_pr_merge(self):
        args = create_argument_parser().parse_args(["pr", "merge", "--number", "12"])
        assert args.pr_command == "merge"
        assert args.number == 12

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args([])


class TestConfigFile:
    def test_loads_from_search_dir(self, tmp_path):
        (tmp_path / ".pygitpushrc.toml").write_text('branch = "dev"\npush_attempts = 5\n')
        assert load_config_file(tmp_path) == {"branch": "dev", "push_attempts": 5}

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('private = true\n')
        assert load_config_file(tmp_path / "elsewhere", str(path)) == {"private": True}

    def test_missing_explicit_path(self, tmp_path, capsys):
        assert load_config_file(tmp_path, str(tmp_path / "nope.toml")) == {}
        assert "not found" in capsys.readouterr().out

    def test_invalid_toml(self, tmp_path, capsys):
        (tmp_path / ".pygitpushrc.toml").write_text("branch = \n")
        assert load_config_file(tmp_path) == {}
        assert "Failed to parse" in capsys.readouterr().out

    def test_none_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
        assert load_config_file(tmp_path) == {}


class TestBuildConfig:
    def test_defaults_to_directory_name(self, tmp_path):
        args = create_argument_parser().parse_args(["push"])
        config = build_config(args, {}, tmp_path / "my-project")
        assert config.repo_name == "my-project"
        assert config.branch == "main"
        assert config.timeout == 120.0

    def test_file_values_used(self, tmp_path):
        args = create_argument_parser().parse_args(["push"])
        file_config = {"branch": "dev", "private": True, "timeout": 60, "remote_url": "/srv/demo.git"}
        config = build_config(args, file_config, tmp_path)
        assert config.branch == "dev"
        assert config.private is True
        assert config.timeout == 60.0
        assert config.remote_url == "/srv/demo.git"

    def test_cli_overrides_file(self, tmp_path):
        args = create_argument_parser().parse_args(["push", "--branch", "feature", "--name", "cli"])
        config = build_config(args, {"branch": "dev", "repo_name": "file"}, tmp_path)
        assert config.branch == "feature"
        assert config.repo_name == "cli"


class TestMain:
    def test_missing_credentials_exit_code(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for key in ENV:
            monkeypatch.delenv(key, raising=False)
        with pytest.raises(SystemExit) as excinfo:
            main(["push", "--commitmsg", "x"])
        assert excinfo.value.code == 1

    def test_missing_credentials_json(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        for key in ENV:
            monkeypatch.delenv(key, raising=False)
        with pytest.raises(SystemExit):
            main(["push", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["error"]["kind"] == "CONFIGURATION_MISSING"
        assert "GITHUB_TOKEN" in data["error"]["message"]


class TestPromptForPullRequest:
    PRS = [{"number": 3, "title": "newer"}, {"number": 2, "title": "older"}]

    def test_valid_choice(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("2\n"))
        assert prompt_for_pull_request(NullOutputHandler())(self.PRS) == 2

    def test_out_of_range(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("5\n"))
        with pytest.raises(PyGitPushError) as excinfo:
            prompt_for_pull_request(NullOutputHandler())(self.PRS)
        assert excinfo.value.message == "invalid selection"

    def test_closed_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(PyGitPushError) as excinfo:
            prompt_for_pull_request(NullOutputHandler())(self.PRS)
        assert excinfo.value.message == "invalid selection"


class TestMainExitCodes:
    @pytest.fixture(autouse=True)
    def environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
        for key, value in ENV.items():
            monkeypatch.setenv(key, value)

    def _push_returns(self, monkeypatch, outcome):
        def push(self, context, message=None):
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        monkeypatch.setattr(SyncOrchestrator, "push", push)

    def test_nothing_to_commit_exits_zero(self, monkeypatch, capsys):
        self._push_returns(monkeypatch, SyncResult(nothing_to_commit=True))
        with pytest.raises(SystemExit) as excinfo:
            main(["push", "--commitmsg", "x"])
        assert excinfo.value.code == 0
        assert "Nothing to commit" in capsys.readouterr().out

    def test_nothing_to_commit_json(self, monkeypatch, capsys):
        self._push_returns(monkeypatch, SyncResult(nothing_to_commit=True))
        with pytest.raises(SystemExit) as excinfo:
            main(["push", "--json"])
        assert excinfo.value.code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["nothing_to_commit"] is True
        assert data["succeeded"] is True

    def test_fatal_error_exits_one(self, monkeypatch, capsys):
        self._push_returns(monkeypatch, PushFailedError("failed to push after 3 attempts", step="push"))
        with pytest.raises(SystemExit) as excinfo:
            main(["push", "--commitmsg", "x"])
        assert excinfo.value.code == 1
        assert "failed to push after 3 attempts" in capsys.readouterr().err

    def test_interrupt_exits_130(self, monkeypatch):
        self._push_returns(monkeypatch, KeyboardInterrupt())
        with pytest.raises(SystemExit) as excinfo:
            main(["push", "--commitmsg", "x"])
        assert excinfo.value.code == 130
