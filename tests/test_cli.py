"""Tests for the openapi-router command line."""
import json
from unittest.mock import patch

import pytest
import yaml

from openapi_router.cli import TargetError, load_router, main
from openapi_router.routing import OpenAPIRouter


class TestLoadRouter:
    def test_module_attribute(self):
        assert isinstance(load_router("tests.apps:router"), OpenAPIRouter)

    def test_factory_callable(self):
        router = load_router("tests.apps:build_router")
        assert isinstance(router, OpenAPIRouter)
        assert not router.sealed

    @pytest.mark.parametrize("target", ["tests.apps", "tests.apps:", ":router"])
    def test_malformed_target(self, target):
        with pytest.raises(TargetError):
            load_router(target)

    def test_missing_module(self):
        with pytest.raises(TargetError):
            load_router("tests.does_not_exist:router")

    def test_missing_attribute(self):
        with pytest.raises(TargetError):
            load_router("tests.apps:nothing")

    def test_class_is_not_called(self):
        with pytest.raises(TargetError, match="is not an OpenAPIRouter"):
            load_router("tests.apps:Todo")

    def test_factory_failure(self):
        with pytest.raises(TargetError, match="RuntimeError: database unavailable"):
            load_router("tests.apps:broken_router")


class TestCliExport:
    def test_export_json_to_stdout(self, capsys):
        assert main(["export", "tests.apps:build_router"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert document["info"]["title"] == "Todo API"
        assert "/todos/{todoId}" in document["paths"]

    def test_export_yaml_to_file(self, tmp_path):
        output = tmp_path / "openapi.yaml"
        assert main(["export", "tests.apps:build_router", "--format", "yaml", "-o", str(output)]) == 0
        document = yaml.safe_load(output.read_text())
        assert document["paths"]["/todos"]["get"]["summary"] == "List all todos"

    def test_bad_target_exit_code(self, capsys):
        assert main(["export", "tests.apps:nothing"]) == 2
        assert "nothing" in capsys.readouterr().err

    def test_failing_factory_exit_code(self, capsys):
        assert main(["export", "tests.apps:broken_router"]) == 2
        assert "database unavailable" in capsys.readouterr().err

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            main(["export", "tests.apps:router", "--format", "xml"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])


class TestCliServe:
    @patch("uvicorn.run")
    def test_serve_runs_uvicorn(self, mock_run):
        assert main(["serve", "tests.apps:build_router", "--host", "127.0.0.1", "--port", "9000"]) == 0
        mock_run.assert_called_once()
        _, kwargs = mock_run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9000
