"""Tests for the command-line surface."""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from kubegate import cli as cli_module
from kubegate.cli import cli
from kubegate.clients.kubernetes.k8s_client import KubernetesClient
from kubegate.clients.kubernetes.registry import ClusterRegistry

from conftest import FakeApiClient, deployment


@pytest.fixture
def fake_api():
    api = FakeApiClient()
    api.add("apps/v1", "deployments", deployment("web", namespace="default"))
    return api


@pytest.fixture
def runner(monkeypatch, fake_api):
    async def from_settings(settings):
        k8s = KubernetesClient({}, cluster_name="prod-a", api_client=fake_api)
        await k8s.connect()
        return ClusterRegistry({"prod-a": k8s})

    monkeypatch.setenv("K8S_DATACENTERS", '["prod-a", "prod-b"]')
    monkeypatch.setenv("GATEWAY_DISCOVERY_BACKOFF_FACTOR", "0")
    monkeypatch.setattr(ClusterRegistry, "from_settings", staticmethod(from_settings))
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    # keep stdout to the JSON envelope
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))
    yield CliRunner()
    structlog.reset_defaults()


def _envelope(result):
    return json.loads(result.stdout)


def test_clusters(runner):
    result = runner.invoke(cli, ["clusters"])

    assert result.exit_code == 0
    envelope = _envelope(result)
    assert envelope["entry_type"] == "LIST_DATACENTER"
    assert envelope["data"] == [{"datacenter": "prod-a", "server_version": "v1.29.2"}]
    assert envelope["message"] == "skipped: prod-b"


def test_list(runner, fake_api):
    result = runner.invoke(cli, ["list", "deployment", "-d", "prod-a", "-l", "app=web", "--limit", "5"])

    assert result.exit_code == 0
    envelope = _envelope(result)
    assert envelope["entry_type"] == "LIST_DEPLOYMENT"
    assert envelope["status"] == "success"
    assert envelope["data"]["items"][0]["metadata"]["name"] == "web"
    assert fake_api.calls[-1][2] == {"labelSelector": "app=web", "limit": 5}


def test_list_all_namespaces(runner, fake_api):
    result = runner.invoke(cli, ["list", "pods", "-d", "prod-a", "-A"])

    assert result.exit_code == 0
    assert fake_api.calls[-1][1] == "/api/v1/pods"


def test_get_missing_object_fails(runner):
    result = runner.invoke(cli, ["get", "deployment", "ghost", "-d", "prod-a"])

    assert result.exit_code == 1
    envelope = _envelope(result)
    assert envelope["entry_type"] == "GET_DEPLOYMENT"
    assert envelope["error_kind"] == "NotFound"


def test_unknown_datacenter(runner):
    result = runner.invoke(cli, ["get", "deployment", "web", "-d", "prod-c"])

    assert result.exit_code == 1
    assert _envelope(result)["error_kind"] == "ClusterNotFound"


def test_create_from_file(runner, tmp_path):
    manifest = tmp_path / "svc.yaml"
    manifest.write_text("apiVersion: apps/v1\nkind: Workload\nmetadata:\n  name: svc-1\n  namespace: team-x\n")

    result = runner.invoke(cli, ["create", "-f", str(manifest), "-d", "prod-a"])

    assert result.exit_code == 0
    envelope = _envelope(result)
    assert envelope["entry_type"] == "CREATE_RESOURCE"
    assert envelope["data"] == "svc-1"
    assert envelope["message"] == "svc-1 create success"


def test_create_with_bad_manifest(runner, tmp_path):
    manifest = tmp_path / "bad.yaml"
    manifest.write_text("kind: Pod\n")

    result = runner.invoke(cli, ["create", "-f", str(manifest), "-d", "prod-a", "--kind", "pod"])

    assert result.exit_code == 1
    envelope = _envelope(result)
    assert envelope["entry_type"] == "CREATE_POD"
    assert envelope["error_kind"] == "DecodeError"
