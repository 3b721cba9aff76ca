"""Tests for ModuleResolver: queries, hierarchy and FunctionInfo assembly."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from daggerdex.dagger_utils import DaggerError
from daggerdex.discovery.executor import SubprocessFailure
from daggerdex.discovery.models import ArgumentInfo, FunctionInfo
from daggerdex.discovery.resolver import ModuleResolver, Resolution
from tests.helpers import _make_arg, _make_executor, _make_function, _make_object


def _resolve(executor, path="/test/workspace") -> Resolution:
    return asyncio.run(ModuleResolver(executor).resolve(path))


class TestEndToEnd:

    def test_root_and_child_module(self):
        objects = [
            _make_object("App", [_make_function("fn-deploy", "deploy", "STRING")]),
            _make_object("AppCli", [
                _make_function(
                    "fn-install", "install", "STRING",
                    args=[_make_arg("target", "STRING", optional=False)],
                ),
            ]),
        ]
        resolution = _resolve(_make_executor(objects))

        assert resolution.ok
        assert resolution.functions == [
            FunctionInfo(
                name="deploy", function_id="fn-deploy", module="", is_parent_module=True,
                return_type="String", args=[], parent_module=None,
            ),
            FunctionInfo(
                name="install", function_id="fn-install", module="cli", is_parent_module=False,
                return_type="String",
                args=[ArgumentInfo(name="target", type="String", required=True)],
                parent_module="app",
            ),
        ]

    def test_parent_with_several_children(self):
        objects = [
            _make_object("DaggerDev", [
                _make_function("func1", "buildImage", "OBJECT_CONTAINER"),
                _make_function("func4", "generateDocs", "OBJECT_DIRECTORY"),
            ]),
            _make_object("DaggerDevCli", [_make_function("func2", "installBinary", "OBJECT_FILE")]),
            _make_object("DaggerDevDocs", [_make_function("func3", "generateDocs", "OBJECT_STRING")]),
        ]
        functions = _resolve(_make_executor(objects)).functions
        assert len(functions) == 4

        root_fns = [f for f in functions if f.is_parent_module]
        assert {f.name for f in root_fns} == {"build-image", "generate-docs"}
        assert all(f.module == "" and f.parent_module is None for f in root_fns)

        by_module = {f.module: f for f in functions if not f.is_parent_module}
        assert by_module["cli"].name == "install-binary"
        assert by_module["cli"].parent_module == "dagger-dev"
        assert by_module["docs"].parent_module == "dagger-dev"
        assert by_module["docs"].return_type == "String"

    def test_duplicate_display_names_keep_distinct_ids(self):
        objects = [
            _make_object("DaggerDev", [_make_function("func4", "generateDocs")]),
            _make_object("DaggerDevDocs", [_make_function("func3", "generateDocs")]),
        ]
        functions = _resolve(_make_executor(objects)).functions
        assert [f.name for f in functions] == ["generate-docs", "generate-docs"]
        assert {f.function_id for f in functions} == {"func3", "func4"}

    def test_single_module_is_standalone(self):
        objects = [
            _make_object("SimpleModule", [
                _make_function("func1", "buildImage", "OBJECT_CONTAINER"),
                _make_function("func2", "runTests", "OBJECT_STRING"),
            ]),
        ]
        functions = _resolve(_make_executor(objects)).functions
        assert len(functions) == 2
        for fn in functions:
            assert fn.is_parent_module is False
            assert fn.module == "simple-module"
            assert fn.parent_module is None

    def test_ambiguous_root_uses_longest_parent(self):
        objects = [
            _make_object("App", [_make_function("a", "root")]),
            _make_object("AppCli", [_make_function("b", "cli")]),
            _make_object("AppCliTest", [_make_function("c", "runTest")]),
        ]
        functions = {f.function_id: f for f in _resolve(_make_executor(objects)).functions}
        assert functions["a"].module == ""
        assert functions["b"].is_parent_module is True
        assert functions["b"].module == ""
        assert functions["b"].parent_module is None
        assert functions["c"].module == "test"
        assert functions["c"].parent_module == "app-cli"

    def test_args_and_return_types(self):
        objects = [
            _make_object("Build", [
                _make_function(
                    "f1", "buildImage",
                    {"kind": "OBJECT_KIND", "asObject": {"name": "Container"}},
                    args=[
                        _make_arg("sourceDir", "OBJECT_KIND", optional=False),
                        _make_arg("verbose", "BOOLEAN_KIND", optional=True),
                        _make_arg("tag", "STRING_KIND", description="Image tag [required]"),
                    ],
                    description="Builds an image",
                ),
            ]),
        ]
        fn = _resolve(_make_executor(objects)).functions[0]
        assert fn.return_type == "Container"
        assert fn.description == "Builds an image"
        assert fn.args == [
            ArgumentInfo(name="source-dir", type="kind", required=True),
            ArgumentInfo(name="verbose", type="Boolean", required=False),
            ArgumentInfo(name="tag", type="String", required=True),
        ]


class TestEmptyResults:

    def test_no_directory_id(self):
        executor = _make_executor([], directory_id=None)
        resolution = _resolve(executor)
        assert resolution.ok
        assert resolution.functions == []
        # Module query is never issued without a handle
        assert executor.execute.await_count == 1

    def test_no_objects(self):
        resolution = _resolve(_make_executor([]))
        assert resolution.ok
        assert resolution.functions == []

    def test_null_objects_filtered(self):
        objects = [None, _make_object("Solo", [_make_function("f1", "run")]), None]
        functions = _resolve(_make_executor(objects)).functions
        assert [f.function_id for f in functions] == ["f1"]


class TestSkippedObjects:

    def test_object_without_functions_skipped(self, caplog):
        objects = [
            {"asObject": {"name": "Broken"}},
            _make_object("Solo", [_make_function("f1", "run")]),
        ]
        with caplog.at_level(logging.WARNING):
            resolution = _resolve(_make_executor(objects))
        assert resolution.ok
        assert [f.function_id for f in resolution.functions] == ["f1"]
        assert "Skipping" in caplog.text

    def test_object_without_as_object_skipped(self):
        objects = [{"name": "Interface"}, _make_object("Solo", [_make_function("f1", "run")])]
        assert [f.function_id for f in _resolve(_make_executor(objects)).functions] == ["f1"]

    def test_malformed_function_skips_only_its_module(self):
        objects = [
            _make_object("Alpha", [{"name": "noId"}]),
            _make_object("Beta", [_make_function("f1", "run")]),
        ]
        resolution = _resolve(_make_executor(objects))
        assert resolution.ok
        assert [f.function_id for f in resolution.functions] == ["f1"]


class TestFailures:

    def test_subprocess_failure_is_reported(self):
        executor = MagicMock()
        executor.execute = AsyncMock(side_effect=SubprocessFailure("boom", returncode=1, stderr="boom"))
        resolution = _resolve(executor)
        assert not resolution.ok
        assert resolution.functions == []
        assert resolution.error == "boom"

    def test_failure_on_module_query_discards_everything(self):
        calls = []

        async def execute(document, variables, working_directory):
            calls.append(variables)
            if "id" in variables:
                raise SubprocessFailure("module load failed")
            return {"host": {"directory": {"id": "dir-1"}}}

        executor = MagicMock()
        executor.execute = AsyncMock(side_effect=execute)
        resolution = _resolve(executor)
        assert resolution.error == "module load failed"
        assert calls == [{"path": "/test/workspace"}, {"id": "dir-1"}]

    def test_failed_resolution_differs_from_empty(self):
        assert Resolution().ok
        assert not Resolution.failed("x").ok


class TestFetchModuleObjects:

    def test_returns_raw_objects(self):
        objects = [_make_object("Solo", [_make_function("f1", "run")])]
        resolver = ModuleResolver(_make_executor(objects))
        assert asyncio.run(resolver.fetch_module_objects("/ws")) == objects

    def test_raises_without_directory_id(self):
        resolver = ModuleResolver(_make_executor([], directory_id=None))
        with pytest.raises(DaggerError, match="No directory ID"):
            asyncio.run(resolver.fetch_module_objects("/ws"))
