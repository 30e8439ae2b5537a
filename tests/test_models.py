"""Tests for reference parsing, package-name extraction and typed documents."""

from __future__ import annotations

import json

import pytest

from action_audit.errors import LockfileFormatError, WorkflowFormatError
from action_audit.models import ActionReference, ActionUsage, Lockfile, Workflow, package_name_from_path


class TestPackageNameFromPath:
    def test_scoped(self):
        assert package_name_from_path("node_modules/@scope/pkg") == "@scope/pkg"

    def test_nested(self):
        assert package_name_from_path("node_modules/a/node_modules/b") == "b"

    def test_simple(self):
        assert package_name_from_path("node_modules/simple") == "simple"

    def test_nested_scoped(self):
        assert package_name_from_path("node_modules/a/node_modules/@s/b") == "@s/b"

    def test_scoped_parent_with_nested_child(self):
        assert package_name_from_path("node_modules/@s/a/node_modules/c") == "c"

    def test_deeply_nested(self):
        assert package_name_from_path("node_modules/a/node_modules/b/node_modules/c") == "c"

    def test_workspace_path_left_alone(self):
        assert package_name_from_path("packages/tool") == "packages/tool"


class TestActionReference:
    def test_owner_repo_ref(self):
        ref = ActionReference.parse("actions/checkout@v4")
        assert (ref.owner, ref.repo, ref.path, ref.ref) == ("actions", "checkout", "", "v4")
        assert ref.full_repo == "actions/checkout"

    def test_sub_path_resolves_to_repo(self):
        ref = ActionReference.parse("github/codeql-action/init@v3")
        assert ref.full_repo == "github/codeql-action"
        assert ref.path == "init"

    def test_without_ref(self):
        assert ActionReference.parse("owner/repo").full_repo == "owner/repo"

    @pytest.mark.parametrize("reference", ["checkout@v4", "docker://alpine:3.19", "/x@v1", "owner/@v1"])
    def test_not_a_repository(self, reference):
        assert ActionReference.parse(reference) is None

    def test_local_path_is_split_literally(self):
        ref = ActionReference.parse("./.github/actions/build")
        assert (ref.owner, ref.repo, ref.path) == (".", ".github", "actions/build")


class TestActionUsage:
    def test_defaults(self):
        info = ActionUsage("a/b@v1")
        assert not info.uses_npm and not info.is_infected and not info.analyzed
        assert info.infected_packages == []

    def test_record_infection_keeps_flag_in_sync(self):
        info = ActionUsage("a/b@v1")
        info.record_infection(["x@1.0.0"])
        assert info.is_infected
        info.record_infection([])
        assert not info.is_infected
        assert info.infected_packages == []


WORKFLOW = """
name: ci
on: [push]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - run: npm test
      - uses: actions/setup-node@v4
        with:
          node-version: 20
  reuse:
    uses: acme/shared/.github/workflows/build.yml@main
  odd: "not a mapping"
"""


class TestWorkflow:
    def test_collects_step_uses(self):
        refs = list(Workflow.from_yaml(WORKFLOW).uses_references())
        assert refs == ["actions/checkout@v4", "actions/setup-node@v4"]

    def test_no_jobs(self):
        assert list(Workflow.from_yaml("name: x\non: push\n").uses_references()) == []

    def test_non_string_uses_ignored(self):
        text = "jobs:\n  a:\n    steps:\n      - uses: [1, 2]\n      - 'plain string'\n"
        assert list(Workflow.from_yaml(text).uses_references()) == []

    def test_invalid_yaml(self):
        with pytest.raises(WorkflowFormatError):
            Workflow.from_yaml("jobs: [unclosed")

    def test_non_mapping_document(self):
        with pytest.raises(WorkflowFormatError):
            Workflow.from_yaml("- just\n- a list\n")

    def test_empty_document(self):
        with pytest.raises(WorkflowFormatError):
            Workflow.from_yaml("")


class TestLockfile:
    def test_locked_packages_skip_root_and_versionless(self):
        doc = {
            "lockfileVersion": 3,
            "packages": {
                "": {"name": "my-action", "version": "1.0.0"},
                "node_modules/left-pad": {"version": "1.3.0"},
                "node_modules/@scope/pkg": {"version": "2.0.0"},
                "node_modules/a/node_modules/b": {"version": "0.1.0"},
                "node_modules/linked": {"link": True},
                "node_modules/weird": "nope",
            },
        }
        lockfile = Lockfile.from_json(json.dumps(doc))
        assert lockfile.lockfile_version == 3
        assert list(lockfile.locked_packages()) == [
            ("left-pad", "1.3.0"),
            ("@scope/pkg", "2.0.0"),
            ("b", "0.1.0"),
        ]

    def test_v1_lockfile_without_packages(self):
        lockfile = Lockfile.from_json(json.dumps({"lockfileVersion": 1, "dependencies": {}}))
        assert list(lockfile.locked_packages()) == []

    def test_invalid_json(self):
        with pytest.raises(LockfileFormatError):
            Lockfile.from_json("{not json")

    def test_non_object(self):
        with pytest.raises(LockfileFormatError):
            Lockfile.from_json("[]")
