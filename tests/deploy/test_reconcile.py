"""Unit tests for web app / deployment slot reconciliation."""

import pytest

from appdock.deploy.errors import ConfigurationError, ResourceError
from appdock.deploy.reconcile import (
    CREATE_NEW_DEPLOYMENT_SLOT,
    reconcile_resource,
    resolve_slot_source,
)
from appdock.deploy.telemetry import Telemetry
from appdock.provisioning.types import DiagnosticConfig, ProviderError, SlotSourceKind


# ── resolve_slot_source ─────────────────────────────────────────────


@pytest.mark.parametrize("value", [None, "", "  ", "parent", "PARENT"])
def test_default_source_is_parent(fake_client, value):
    app = fake_client.add_app()
    assert resolve_slot_source(fake_client, app, value).kind == SlotSourceKind.PARENT
    assert fake_client.calls == []


def test_new_source(fake_client):
    app = fake_client.add_app()
    assert resolve_slot_source(fake_client, app, "New").kind == SlotSourceKind.NEW


def test_sibling_slot_source(fake_client):
    app = fake_client.add_app()
    sibling = fake_client.add_slot("demo", "staging1")
    source = resolve_slot_source(fake_client, app, "staging1")
    assert source.kind == SlotSourceKind.SLOT
    assert source.slot is sibling


def test_missing_sibling_is_configuration_error(fake_client):
    app = fake_client.add_app()
    with pytest.raises(ConfigurationError, match="staging2"):
        resolve_slot_source(fake_client, app, "staging2")


def test_sibling_lookup_failure_is_resource_error(fake_client):
    app = fake_client.add_app()
    fake_client.fail["lookup_slot"] = ProviderError("throttled", status_code=429)
    with pytest.raises(ResourceError, match="staging2"):
        resolve_slot_source(fake_client, app, "staging2")


# ── reconcile_resource: base app ────────────────────────────────────


def test_no_slot_creates_or_updates_app(fake_client, make_config):
    config = make_config(app_settings={"A": "1"})
    target = reconcile_resource(fake_client, config)

    assert target.app_name == "demo"
    assert not target.is_slot
    method, name, app_config = fake_client.calls[0]
    assert (method, name) == ("create_or_update_app", "demo")
    assert app_config.app_settings == {"A": "1"}
    assert app_config.runtime.web_container == "Tomcat 9.0"


def test_app_provider_failure_is_resource_error(fake_client, make_config):
    fake_client.fail["create_or_update_app"] = ProviderError("quota exceeded")
    with pytest.raises(ResourceError, match="quota exceeded"):
        reconcile_resource(fake_client, make_config())


# ── reconcile_resource: slots ───────────────────────────────────────


def test_slot_requires_existing_app(fake_client, make_config):
    with pytest.raises(ConfigurationError, match="does not exist"):
        reconcile_resource(fake_client, make_config(deployment_slot_name="staging"))
    assert "create_slot" not in fake_client.methods()


def test_creates_missing_slot_from_parent(fake_client, make_config):
    fake_client.add_app()
    telemetry = Telemetry()
    diag = DiagnosticConfig(web_server_logging=True)
    config = make_config(deployment_slot_name="staging", app_settings={"A": "1"}, diagnostic_config=diag)

    slot = reconcile_resource(fake_client, config, telemetry)

    assert slot.name == "demo/staging"
    create = [c for c in fake_client.calls if c[0] == "create_slot"][0]
    _, app_name, name, source, app_settings, diagnostic = create
    assert (app_name, name) == ("demo", "staging")
    assert source.kind == SlotSourceKind.PARENT
    assert app_settings == {"A": "1"}
    assert diagnostic is diag
    assert telemetry.properties[CREATE_NEW_DEPLOYMENT_SLOT] == "True"
    # slot handle refreshed first, then the parent
    assert fake_client.methods()[-2:] == ["refresh", "refresh"]
    assert fake_client.calls[-2][1] == "demo/staging"
    assert fake_client.calls[-1][1] == "demo"


def test_existing_slot_is_not_recreated(fake_client, make_config):
    fake_client.add_app()
    existing = fake_client.add_slot("demo", "staging")

    slot = reconcile_resource(fake_client, make_config(deployment_slot_name="staging"))

    assert slot is existing
    assert "create_slot" not in fake_client.methods()


def test_missing_source_slot_fails_before_any_create(fake_client, make_config):
    fake_client.add_app()
    config = make_config(deployment_slot_name="staging", deployment_slot_configuration_source="staging2")

    with pytest.raises(ConfigurationError):
        reconcile_resource(fake_client, config)
    assert "create_slot" not in fake_client.methods()


def test_slot_create_failure_is_resource_error(fake_client, make_config):
    fake_client.add_app()
    fake_client.fail["create_slot"] = ProviderError("conflict", status_code=409)
    with pytest.raises(ResourceError, match="conflict"):
        reconcile_resource(fake_client, make_config(deployment_slot_name="staging"))
