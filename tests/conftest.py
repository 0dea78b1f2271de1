"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import pytest
import yaml

from appdock.config.types import Artifact, DeploymentResource, RuntimeSpec, WebAppConfig
from appdock.provisioning.types import HostingResource, ProviderError, RuntimeInfo

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the appdock CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "appdock.appdock", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture
def make_config_file(tmp_path):
    """Return a factory that writes a temporary appdock.yaml and returns its path."""

    def _make(config=None, **overrides):
        if config is None:
            config = {
                "subscription_id": "sub-1",
                "resource_group": "rg-1",
                "app_name": "demo",
                "runtime": {"os": "linux", "java_version": "Java 17", "web_container": "Tomcat 9.0"},
            }
        config = {**config, **overrides}
        config_path = tmp_path / "appdock.yaml"
        with open(config_path, "w") as f:
            yaml.dump(config, f)
        return str(config_path)

    return _make


# ── Unit-test fixtures ──────────────────────────────────────────────


class FakeClient:
    """Recording stand-in for ArmClient.

    ``calls`` is the ordered list of ``(method, target, *details)`` tuples.
    Pre-seed ``apps`` / ``slots`` to simulate existing resources and
    ``fail`` (method name -> exception) to inject provider failures.
    """

    def __init__(self, runtime=None):
        self.runtime = runtime or RuntimeInfo(os="linux", web_container="Tomcat 9.0", java_version="17")
        self.apps: dict[str, HostingResource] = {}
        self.slots: dict[tuple[str, str], HostingResource] = {}
        self.fail: dict[str, Exception] = {}
        self.calls = []

    def _maybe_fail(self, method):
        if method in self.fail:
            raise self.fail[method]

    def add_app(self, name="demo", runtime=None):
        app = HostingResource(
            subscription_id="sub-1",
            resource_group="rg-1",
            app_name=name,
            exists=True,
            runtime=runtime or self.runtime,
            host_name=f"{name}.azurewebsites.net",
            state="Running",
        )
        self.apps[name] = app
        return app

    def add_slot(self, app_name, slot_name):
        app = self.apps[app_name]
        slot = HostingResource(
            subscription_id=app.subscription_id,
            resource_group=app.resource_group,
            app_name=app_name,
            slot_name=slot_name,
            exists=True,
            runtime=app.runtime,
            host_name=f"{app_name}-{slot_name}.azurewebsites.net",
            state="Running",
        )
        self.slots[(app_name, slot_name)] = slot
        return slot

    def methods(self):
        return [c[0] for c in self.calls]

    # ── client surface ──

    def lookup_app(self, subscription_id, resource_group, app_name):
        self.calls.append(("lookup_app", app_name))
        self._maybe_fail("lookup_app")
        return self.apps.get(app_name)

    def lookup_slot(self, app, name):
        self.calls.append(("lookup_slot", app.app_name, name))
        self._maybe_fail("lookup_slot")
        return self.slots.get((app.app_name, name))

    def refresh(self, resource):
        self.calls.append(("refresh", resource.name))
        return resource

    def create_or_update_app(self, config):
        self.calls.append(("create_or_update_app", config.app_name, config))
        self._maybe_fail("create_or_update_app")
        return self.apps.get(config.app_name) or self.add_app(config.app_name)

    def create_slot(self, app, name, source, app_settings=None, diagnostic_config=None):
        self.calls.append(("create_slot", app.app_name, name, source, app_settings, diagnostic_config))
        self._maybe_fail("create_slot")
        return self.add_slot(app.app_name, name)

    def stop(self, resource):
        self.calls.append(("stop", resource.name))
        self._maybe_fail("stop")
        resource.state = "Stopped"

    def start(self, resource):
        self.calls.append(("start", resource.name))
        self._maybe_fail("start")
        resource.state = "Running"

    def deploy_file(self, resource, deploy_type, file, path=""):
        self.calls.append(("deploy_file", resource.name, deploy_type, os.path.basename(str(file)), path))
        self._maybe_fail("deploy_file")

    def zip_deploy(self, resource, zip_file):
        self.calls.append(("zip_deploy", resource.name, zip_file))
        self._maybe_fail("zip_deploy")


class FakeChannel:
    """Recording stand-in for the FTP side channel."""

    def __init__(self, fail=None):
        self.pushes = []
        self.fail = fail

    def push(self, resource, files):
        files = list(files)
        self.pushes.append((resource.name, files))
        if self.fail is not None:
            raise self.fail


class FakePackager:
    """Packager that records its input and returns a fixed zip path."""

    def __init__(self, zip_path="/tmp/fake.zip"):
        self.zip_path = zip_path
        self.packaged = []

    def package(self, artifacts):
        self.packaged.append(list(artifacts))
        return self.zip_path


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_channel():
    return FakeChannel()


@pytest.fixture
def make_artifact(tmp_path):
    """Return a factory that writes a small build output and wraps it as an Artifact."""

    def _make(name, path="", type=None, content=b"payload"):
        file = tmp_path / "build" / name
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_bytes(content)
        return Artifact(file=file, path=path, type=type)

    return _make


@pytest.fixture
def make_config():
    """Return a factory for WebAppConfig objects with sensible defaults."""

    def _make(**overrides):
        fields = {
            "subscription_id": "sub-1",
            "resource_group": "rg-1",
            "app_name": "demo",
            "runtime": RuntimeSpec(os="linux", java_version="Java 17", web_container="Tomcat 9.0"),
        }
        fields.update(overrides)
        return WebAppConfig(**fields)

    return _make


@pytest.fixture
def external_resource(tmp_path):
    """A directory with a few files, flagged for the FTP side channel."""
    root = tmp_path / "extra"
    (root / "conf").mkdir(parents=True)
    (root / "conf" / "app.properties").write_text("a=1\n")
    (root / "conf" / "debug.log").write_text("noise\n")
    (root / "readme.txt").write_text("hi\n")
    return DeploymentResource(directory=root, target_path="/home/site", excludes=["*.log"], external=True)


@pytest.fixture
def provider_error():
    return ProviderError("boom", status_code=500)
