"""Azure App Service client: web apps, deployment slots and Kudu deploys via REST.

Management-plane calls go to Azure Resource Manager; artifact uploads go to
the app's Kudu (SCM) endpoint. All calls are blocking.
"""

import json
import logging
import os
import xml.etree.ElementTree as ET

import httpx

from appdock.provisioning.types import (
    AppServiceConfig,
    DeployType,
    DiagnosticConfig,
    HostingResource,
    ProviderError,
    PublishingProfile,
    RuntimeConfig,
    RuntimeInfo,
    SlotConfigSource,
    SlotSourceKind,
)

logger = logging.getLogger(__name__)

DEFAULT_ARM_URL = "https://management.azure.com"
API_VERSION = "2022-03-01"
DOCKER_HUB_URL = "https://index.docker.io"
CAN_NOT_UPDATE_OS = "Can not update the operating system for existing app service"

_LIFECYCLE_VERBS = {"stop": "Stopping", "start": "Starting", "restart": "Restarting"}


# ── Runtime translation ───────────────────────────────────────────


def _java_major(java_version):
    """'Java 11' -> '11', '1.8' -> '8', '17' -> '17'."""
    version = str(java_version or "").lower().replace("java", "").strip()
    if version.startswith("1."):
        version = version[2:]
    return version.split(".")[0] or "17"


def _linux_java_suffix(java):
    return "jre8" if java == "8" else f"java{java}"


def _site_config(runtime: RuntimeConfig) -> dict:
    """Translate a RuntimeConfig into an ARM siteConfig fragment."""
    os_name = (runtime.os or "linux").lower()
    if os_name == "docker":
        config = {"linuxFxVersion": f"DOCKER|{runtime.image}"}
        if runtime.startup_command:
            config["appCommandLine"] = runtime.startup_command
        return config

    java = _java_major(runtime.java_version)
    stack, _, container_version = (runtime.web_container or "Java SE").partition(" ")
    is_java_se = stack.lower() == "java"

    if os_name == "linux":
        if is_java_se:
            return {"linuxFxVersion": f"JAVA|{java}-{_linux_java_suffix(java)}"}
        return {"linuxFxVersion": f"{stack.upper()}|{container_version}-{_linux_java_suffix(java)}"}

    if os_name == "windows":
        if is_java_se:
            return {"javaVersion": java, "javaContainer": "JAVA", "javaContainerVersion": "SE"}
        return {"javaVersion": java, "javaContainer": stack.upper(), "javaContainerVersion": container_version}

    raise ProviderError(f"Unsupported operating system {runtime.os}")


def _docker_settings(runtime: RuntimeConfig) -> dict:
    """Registry app settings for private images; empty for public Docker Hub images."""
    if (runtime.os or "").lower() != "docker" or not (runtime.username or runtime.password):
        return {}
    return {
        "DOCKER_REGISTRY_SERVER_URL": runtime.registry_url or DOCKER_HUB_URL,
        "DOCKER_REGISTRY_SERVER_USERNAME": runtime.username or "",
        "DOCKER_REGISTRY_SERVER_PASSWORD": runtime.password or "",
    }


def _runtime_from_site(site) -> RuntimeInfo:
    """Read the runtime descriptor out of an ARM site payload."""
    kind = (site.get("kind") or "").lower()
    props = site.get("properties") or {}
    site_config = props.get("siteConfig") or {}
    fx = site_config.get("linuxFxVersion") or ""

    if fx.upper().startswith("DOCKER|") or "container" in kind:
        return RuntimeInfo(os="docker", image=fx.split("|", 1)[-1])

    if "linux" in kind:
        stack, _, version = fx.partition("|")
        container_version, _, java = version.partition("-")
        java = java.replace("java", "").replace("jre", "")
        if stack.upper() == "JAVA":
            return RuntimeInfo(os="linux", web_container="Java SE", java_version=java)
        if stack:
            return RuntimeInfo(os="linux", web_container=f"{stack.capitalize()} {container_version}", java_version=java)
        return RuntimeInfo(os="linux")

    container = site_config.get("javaContainer") or ""
    if container.upper() == "JAVA":
        web_container = "Java SE"
    elif container:
        web_container = f"{container.capitalize()} {site_config.get('javaContainerVersion', '')}".strip()
    else:
        web_container = ""
    return RuntimeInfo(os="windows", web_container=web_container, java_version=site_config.get("javaVersion") or "")


def _runtime_info(runtime: RuntimeConfig) -> RuntimeInfo:
    """Runtime descriptor an app converged to *runtime* reports."""
    return RuntimeInfo(
        os=(runtime.os or "linux").lower(),
        web_container=runtime.web_container or "",
        java_version=runtime.java_version or "",
        image=runtime.image or "",
    )


def _diagnostic_payload(diagnostic: DiagnosticConfig) -> dict:
    props = {
        "httpLogs": {
            "fileSystem": {
                "enabled": diagnostic.web_server_logging,
                "retentionInMb": diagnostic.retention_mb,
                "retentionInDays": diagnostic.retention_days,
            }
        }
    }
    if diagnostic.application_logging_level:
        props["applicationLogs"] = {"fileSystem": {"level": diagnostic.application_logging_level}}
    return {"properties": props}


def _require_file(path):
    if not os.path.isfile(path):
        raise ProviderError(f"File not found: {path}")


def _parse_publish_xml(text) -> PublishingProfile:
    """Pick the FTP entry out of a publishxml document."""
    root = ET.fromstring(text)
    for profile in root.iter("publishProfile"):
        if profile.get("publishMethod", "").upper() == "FTP":
            return PublishingProfile(
                ftp_url=profile.get("publishUrl", ""),
                username=profile.get("userName", ""),
                password=profile.get("userPWD", ""),
            )
    raise ProviderError("No FTP publishing profile found")


# ── Client ─────────────────────────────────────────────────────────


class ArmClient:
    """Blocking App Service client bound to one bearer token.

    Args:
        access_token: ARM bearer token (also accepted by Kudu).
        arm_url: management endpoint, overridable for sovereign clouds.
        dry_run: log every request as ``[dry-run] METHOD url`` and return placeholders.
        transport: optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(self, access_token, arm_url=DEFAULT_ARM_URL, dry_run=False, timeout=60, transport=None):
        self.arm_url = arm_url.rstrip("/")
        self.dry_run = dry_run
        self._http = httpx.Client(
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ── transport helpers ──

    def _request(self, method, url, allow_missing=False, **kwargs):
        """Send one request; returns the httpx response, or None on dry-run / allowed 404."""
        if self.dry_run:
            logger.info(f"[dry-run] {method} {url}")
            if "json" in kwargs:
                logger.info(f"[dry-run] payload: {json.dumps(kwargs['json'], indent=2)}")
            return None
        try:
            resp = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"{method} {url} failed: {e}") from e
        if allow_missing and resp.status_code == 404:
            return None
        if resp.is_error:
            raise ProviderError(f"{method} {url} returned {resp.status_code}: {resp.text[:500]}", status_code=resp.status_code)
        return resp

    def _arm(self, method, path, data=None, allow_missing=False):
        kwargs = {"params": {"api-version": API_VERSION}}
        if data is not None:
            kwargs["json"] = data
        resp = self._request(method, f"{self.arm_url}{path}", allow_missing=allow_missing, **kwargs)
        if resp is None:
            return None
        return resp.json() if resp.content else {}

    @staticmethod
    def _scm_url(resource: HostingResource):
        host = resource.host_name
        if not host:
            name = f"{resource.app_name}-{resource.slot_name}" if resource.is_slot else resource.app_name
            host = f"{name}.azurewebsites.net"
        prefix, _, domain = host.partition(".")
        return f"https://{prefix}.scm.{domain}"

    def _apply_site(self, resource: HostingResource, site) -> HostingResource:
        """Copy remote state into *resource*.

        The site payload leaves most siteConfig fields null, so the runtime is
        read from ``config/web`` when that resource answers.
        """
        props = site.get("properties") or {}
        resource.exists = True
        resource.host_name = props.get("defaultHostName") or resource.host_name
        resource.state = props.get("state") or "Unknown"
        resource.region = site.get("location") or resource.region
        web = self._arm("GET", f"{resource.resource_id}/config/web", allow_missing=True)
        web_props = {k: v for k, v in ((web or {}).get("properties") or {}).items() if v is not None}
        if web_props:
            site_config = {**(props.get("siteConfig") or {}), **web_props}
            site = {**site, "properties": {**props, "siteConfig": site_config}}
        resource.runtime = _runtime_from_site(site)
        return resource

    def _merge_app_settings(self, resource_path, app_settings):
        """Add *app_settings* on top of the current ones; existing keys are never removed."""
        if not app_settings:
            return
        current = self._arm("POST", f"{resource_path}/config/appsettings/list") or {}
        merged = {**(current.get("properties") or {}), **app_settings}
        self._arm("PUT", f"{resource_path}/config/appsettings", {"properties": merged})

    def _apply_diagnostic(self, resource_path, diagnostic):
        if diagnostic is not None:
            self._arm("PUT", f"{resource_path}/config/logs", _diagnostic_payload(diagnostic))

    # ── lookups ──

    def lookup_app(self, subscription_id, resource_group, app_name) -> HostingResource | None:
        """Return the web app handle, or None if it does not exist."""
        resource = HostingResource(subscription_id=subscription_id, resource_group=resource_group, app_name=app_name)
        if self.dry_run:
            logger.info(f"[dry-run] GET {self.arm_url}{resource.resource_id}")
            resource.exists = True
            resource.host_name = f"{app_name}.azurewebsites.net"
            return resource
        site = self._arm("GET", resource.resource_id, allow_missing=True)
        if site is None:
            return None
        return self._apply_site(resource, site)

    def lookup_slot(self, app: HostingResource, name) -> HostingResource | None:
        """Return the named slot of *app*, or None if it does not exist."""
        slot = HostingResource(
            subscription_id=app.subscription_id,
            resource_group=app.resource_group,
            app_name=app.app_name,
            slot_name=name,
            region=app.region,
        )
        if self.dry_run:
            logger.info(f"[dry-run] GET {self.arm_url}{slot.resource_id}")
            return None
        site = self._arm("GET", slot.resource_id, allow_missing=True)
        if site is None:
            return None
        return self._apply_site(slot, site)

    def refresh(self, resource: HostingResource) -> HostingResource:
        """Reload remote state into *resource* in place."""
        site = self._arm("GET", resource.resource_id, allow_missing=True)
        if site is None:
            if not self.dry_run:
                resource.exists = False
            return resource
        return self._apply_site(resource, site)

    # ── create / update ──

    def _ensure_service_plan(self, config: AppServiceConfig):
        plan_rg = config.service_plan_resource_group or config.resource_group
        plan_name = config.service_plan_name or f"{config.app_name}-plan"
        path = f"/subscriptions/{config.subscription_id}/resourceGroups/{plan_rg}/providers/Microsoft.Web/serverfarms/{plan_name}"
        plan = None if self.dry_run else self._arm("GET", path, allow_missing=True)
        if plan is not None:
            return plan.get("id", path)

        is_windows = (config.runtime.os or "linux").lower() == "windows"
        logger.info(f"Creating app service plan {plan_name} ({config.pricing_tier})...")
        body = {
            "location": config.region,
            "kind": "app" if is_windows else "linux",
            "sku": {"name": config.pricing_tier},
            "properties": {"reserved": not is_windows},
        }
        created = self._arm("PUT", path, body)
        return (created or {}).get("id", path)

    def create_or_update_app(self, config: AppServiceConfig) -> HostingResource:
        """Converge the base web app to *config*: update it if it exists, else create it."""
        existing = self.lookup_app(config.subscription_id, config.resource_group, config.app_name)
        site_config = _site_config(config.runtime)
        app_settings = {**config.app_settings, **_docker_settings(config.runtime)}

        if existing is not None:
            wanted_os = (config.runtime.os or "").lower()
            if existing.runtime.os and wanted_os and existing.runtime.os != wanted_os:
                raise ProviderError(CAN_NOT_UPDATE_OS)
            logger.info(f"Updating web app {config.app_name}...")
            path = existing.resource_id
            self._arm("PATCH", path, {"properties": {"siteConfig": site_config}})
            self._merge_app_settings(path, app_settings)
            self._apply_diagnostic(path, config.diagnostic_config)
            logger.info(f"Successfully updated web app {config.app_name}.")
            if self.dry_run:
                existing.runtime = _runtime_info(config.runtime)
                return existing
            return self.refresh(existing)

        logger.info(f"Creating web app {config.app_name}...")
        plan_id = self._ensure_service_plan(config)
        os_name = (config.runtime.os or "linux").lower()
        resource = HostingResource(
            subscription_id=config.subscription_id,
            resource_group=config.resource_group,
            app_name=config.app_name,
            region=config.region,
        )
        body = {
            "location": config.region,
            "kind": {"windows": "app", "docker": "app,linux,container"}.get(os_name, "app,linux"),
            "properties": {
                "serverFarmId": plan_id,
                "reserved": os_name != "windows",
                "siteConfig": {
                    **site_config,
                    "appSettings": [{"name": k, "value": v} for k, v in app_settings.items()],
                },
            },
        }
        site = self._arm("PUT", resource.resource_id, body)
        self._apply_diagnostic(resource.resource_id, config.diagnostic_config)
        logger.info(f"Successfully created web app {config.app_name}.")
        if site is None:  # dry-run
            resource.exists = True
            resource.host_name = f"{config.app_name}.azurewebsites.net"
            resource.runtime = _runtime_info(config.runtime)
            return resource
        return self._apply_site(resource, site)

    def create_slot(
        self,
        app: HostingResource,
        name,
        source: SlotConfigSource,
        app_settings=None,
        diagnostic_config: DiagnosticConfig | None = None,
    ) -> HostingResource:
        """Create deployment slot *name* under *app*, cloning configuration per *source*."""
        slot = HostingResource(
            subscription_id=app.subscription_id,
            resource_group=app.resource_group,
            app_name=app.app_name,
            slot_name=name,
            region=app.region,
        )
        properties = {}
        if source.kind == SlotSourceKind.PARENT:
            properties["cloningInfo"] = {"sourceWebAppId": app.resource_id}
        elif source.kind == SlotSourceKind.SLOT:
            properties["cloningInfo"] = {"sourceWebAppId": source.slot.resource_id}
        body = {"location": app.region, "properties": properties}

        site = self._arm("PUT", slot.resource_id, body)
        self._merge_app_settings(slot.resource_id, app_settings)
        self._apply_diagnostic(slot.resource_id, diagnostic_config)
        if site is None:  # dry-run
            slot.exists = True
            slot.host_name = f"{app.app_name}-{name}.azurewebsites.net"
            slot.runtime = app.runtime
            return slot
        return self._apply_site(slot, site)

    # ── lifecycle ──

    def _lifecycle(self, resource: HostingResource, action, state):
        logger.info(f"{_LIFECYCLE_VERBS[action]} {resource.name}...")
        self._arm("POST", f"{resource.resource_id}/{action}")
        if state:
            resource.state = state

    def stop(self, resource: HostingResource):
        self._lifecycle(resource, "stop", "Stopped")

    def start(self, resource: HostingResource):
        self._lifecycle(resource, "start", "Running")

    def restart(self, resource: HostingResource):
        self._lifecycle(resource, "restart", "Running")

    # ── deploy ──

    def deploy_file(self, resource: HostingResource, deploy_type: DeployType, file, path=""):
        """Upload one file through OneDeploy (``/api/publish``)."""
        params = {"type": deploy_type.value}
        if path:
            params["path"] = path
        url = f"{self._scm_url(resource)}/api/publish"
        logger.info(f"Deploying {file} ({deploy_type.value}) to {resource.name}{' at ' + path if path else ''}...")
        _require_file(file)
        if self.dry_run:
            self._request("POST", f"{url}?{httpx.QueryParams(params)}")
            return
        try:
            with open(file, "rb") as f:
                self._request("POST", url, params=params, content=f)
        except OSError as e:
            raise ProviderError(f"Failed to read {file}: {e}") from e

    def zip_deploy(self, resource: HostingResource, zip_file):
        """Upload a zip package through ``/api/zipdeploy``."""
        url = f"{self._scm_url(resource)}/api/zipdeploy"
        logger.info(f"Deploying package {zip_file} to {resource.name}...")
        _require_file(zip_file)
        if self.dry_run:
            self._request("POST", url)
            return
        try:
            with open(zip_file, "rb") as f:
                self._request("POST", url, content=f, headers={"Content-Type": "application/zip"})
        except OSError as e:
            raise ProviderError(f"Failed to read {zip_file}: {e}") from e

    def get_publishing_profile(self, resource: HostingResource) -> PublishingProfile:
        """Fetch the FTP publishing endpoint and credentials."""
        url = f"{self.arm_url}{resource.resource_id}/publishxml"
        resp = self._request("POST", url, params={"api-version": API_VERSION}, json={"format": "Ftp"})
        if resp is None:  # dry-run
            return PublishingProfile(
                ftp_url="ftps://dry-run.ftp.azurewebsites.windows.net/site/wwwroot",
                username=f"{resource.app_name}\\$dry-run",
                password="",
            )
        return _parse_publish_xml(resp.text)
