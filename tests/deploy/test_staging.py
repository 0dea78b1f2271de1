"""Unit tests for the staging packager."""

import zipfile

import pytest

from appdock.deploy.errors import PackagingError
from appdock.deploy.staging import (
    JAVA_SE_JAR_NAME,
    StagingPackager,
    prepare_java_se_jar,
    stage_artifacts,
    zip_directory,
)


def _names(zip_path):
    with zipfile.ZipFile(zip_path) as zf:
        return sorted(zf.namelist())


# ── stage_artifacts ─────────────────────────────────────────────────


def test_stage_copies_into_relative_paths(make_artifact):
    staging = stage_artifacts([
        make_artifact("a.war"),
        make_artifact("lib.jar", path="/lib/ext/"),
    ])
    assert (staging / "a.war").is_file()
    assert (staging / "lib" / "ext" / "lib.jar").is_file()


def test_stage_missing_file_raises_packaging_error(make_artifact):
    artifact = make_artifact("gone.war")
    artifact.file.unlink()
    with pytest.raises(PackagingError, match="Failed to package resources"):
        stage_artifacts([artifact])


# ── zip_directory ───────────────────────────────────────────────────


def test_zip_contains_relative_posix_paths(make_artifact):
    staging = stage_artifacts([make_artifact("a.war"), make_artifact("x.txt", path="static/css")])
    zip_path = zip_directory(staging, "demo")
    assert zip_path.name.startswith("demo")
    assert zip_path.suffix == ".zip"
    assert _names(zip_path) == ["a.war", "static/css/x.txt"]


def test_zip_names_are_unique(tmp_path):
    (tmp_path / "f.txt").write_text("x")
    assert zip_directory(tmp_path, "demo") != zip_directory(tmp_path, "demo")


# ── prepare_java_se_jar ─────────────────────────────────────────────


def test_lone_jar_is_renamed_to_app_jar(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "service-1.0.jar").write_bytes(b"jar")
    target = prepare_java_se_jar(tmp_path)
    assert target == tmp_path / JAVA_SE_JAR_NAME
    assert target.read_bytes() == b"jar"
    assert not (tmp_path / "nested" / "service-1.0.jar").exists()


def test_multiple_jars_pick_build_final_name(tmp_path):
    (tmp_path / "service.jar").write_bytes(b"main")
    (tmp_path / "helper.jar").write_bytes(b"dep")
    prepare_java_se_jar(tmp_path, build_final_name="service")
    assert (tmp_path / JAVA_SE_JAR_NAME).read_bytes() == b"main"
    assert (tmp_path / "helper.jar").exists()


def test_multiple_jars_without_build_final_name_fail(tmp_path):
    (tmp_path / "a.jar").write_bytes(b"a")
    (tmp_path / "b.jar").write_bytes(b"b")
    with pytest.raises(PackagingError, match="Multiple jars"):
        prepare_java_se_jar(tmp_path)


def test_no_jar_fails(tmp_path):
    (tmp_path / "index.html").write_text("<html/>")
    with pytest.raises(PackagingError, match="No executable jar"):
        prepare_java_se_jar(tmp_path)


# ── StagingPackager ─────────────────────────────────────────────────


def test_packager_produces_single_zip(make_artifact):
    packager = StagingPackager("demo")
    zip_path = packager.package([make_artifact("a.war"), make_artifact("b.txt", path="docs")])
    assert _names(zip_path) == ["a.war", "docs/b.txt"]


def test_packager_java_se_puts_app_jar_at_root(make_artifact):
    packager = StagingPackager("demo", build_final_name="svc", java_se=True)
    zip_path = packager.package([
        make_artifact("svc.jar", path="target"),
        make_artifact("application.yml"),
    ])
    assert _names(zip_path) == ["app.jar", "application.yml"]
