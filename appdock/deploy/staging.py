"""Staging packager: copy artifacts into a temp tree and zip it for zip deploy."""

import atexit
import logging
import os
import shutil
import tempfile
import uuid
import zipfile
from pathlib import Path

from appdock.deploy.errors import PackagingError

logger = logging.getLogger(__name__)

# Java SE hosts run a single executable jar with this name from the package root.
JAVA_SE_JAR_NAME = "app.jar"


def stage_artifacts(artifacts) -> Path:
    """Copy each artifact into ``<staging>/<artifact.path>``; returns the staging root.

    The directory is removed at interpreter exit, whether or not the deploy succeeds.
    """
    try:
        staging = Path(tempfile.mkdtemp(prefix="appdock-staging-"))
    except OSError as e:
        raise PackagingError(f"Failed to package resources: {e}") from e
    atexit.register(shutil.rmtree, staging, ignore_errors=True)

    try:
        for artifact in artifacts:
            rel = artifact.path.strip("/")
            target_dir = staging / rel if rel else staging
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(artifact.file, target_dir / Path(artifact.file).name)
    except OSError as e:
        raise PackagingError(f"Failed to package resources: {e}") from e

    logger.info(f"Staged {len(artifacts)} artifact(s) in {staging}")
    return staging


def prepare_java_se_jar(staging: Path, build_final_name=None) -> Path:
    """Move the executable jar to ``<staging>/app.jar``.

    A lone jar is taken as-is. With several jars, exactly one must be named
    ``<build_final_name>.jar``; anything else is left for the user to resolve.
    """
    jars = sorted(p for p in staging.rglob("*.jar") if p.is_file())
    if not jars:
        raise PackagingError(
            "No executable jar found among the artifacts. Make sure the executable jar is included."
        )

    if len(jars) == 1:
        jar = jars[0]
    else:
        matches = [j for j in jars if build_final_name and j.name == f"{build_final_name}.jar"]
        if len(matches) != 1:
            names = ", ".join(j.name for j in jars)
            raise PackagingError(
                f"Multiple jars found ({names}). Set the build final name to the executable jar's name."
            )
        jar = matches[0]

    target = staging / JAVA_SE_JAR_NAME
    if jar != target:
        try:
            os.replace(jar, target)
        except OSError as e:
            raise PackagingError(f"Failed to rename {jar.name} to {JAVA_SE_JAR_NAME}: {e}") from e
        logger.info(f"Renamed {jar.name} to {JAVA_SE_JAR_NAME}")
    return target


def zip_directory(staging: Path, app_name) -> Path:
    """Zip *staging* recursively into a uniquely named temp file."""
    fd, name = tempfile.mkstemp(prefix=f"{app_name}{uuid.uuid4().hex}", suffix=".zip")
    os.close(fd)
    zip_path = Path(name)
    atexit.register(_remove_quietly, zip_path)

    try:
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for file in sorted(staging.rglob("*")):
                if file.is_file():
                    zf.write(file, file.relative_to(staging).as_posix())
    except OSError as e:
        _remove_quietly(zip_path)
        raise PackagingError(f"Failed to zip {staging}: {e}") from e

    return zip_path


def _remove_quietly(path: Path):
    path.unlink(missing_ok=True)


class StagingPackager:
    """Produces one zip package from a list of untyped artifacts.

    Args:
        app_name: prefix of the generated zip file name.
        build_final_name: build output name used to pick the jar in Java SE mode.
        java_se: the target runs a bare Java SE runtime (no servlet container).
    """

    def __init__(self, app_name, build_final_name=None, java_se=False):
        self.app_name = app_name
        self.build_final_name = build_final_name
        self.java_se = java_se

    def package(self, artifacts) -> Path:
        staging = stage_artifacts(artifacts)
        if self.java_se:
            prepare_java_se_jar(staging, self.build_final_name)
        zip_path = zip_directory(staging, self.app_name)
        logger.info(f"Packaged {len(artifacts)} artifact(s) into {zip_path}")
        return zip_path
