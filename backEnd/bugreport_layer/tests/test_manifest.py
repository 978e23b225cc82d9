"""Tests for project manifest persistence and project operations."""

import json

import pytest

from bugreport_layer.src.errors import PersistenceError, ProtectedPathError
from bugreport_layer.src.manifest import (
    ProjectManifest,
    delete_project,
    load_manifest,
    open_project,
    rename_project,
    resolve_project_dir,
    save_manifest,
)
from bugreport_layer.src.schemas.artifact import ArtifactKind, ArtifactRecord


@pytest.fixture
def manifest() -> ProjectManifest:
    m = ProjectManifest(
        project_name="bundle",
        archive_path="/data/logs/bundle.zip",
        created_at_ms=1704067200000,
    )
    m.add_artifact(
        ArtifactRecord(
            file_name="bugreport.txt",
            file_size=20 * 1024 * 1024,
            relative_path="bugreport.txt",
            original_path="inner.zip/bugreport.txt",
            kind=ArtifactKind.BUGREPORT,
            segments=[f"bugreport_sub{i}.txt" for i in range(1, 11)],
        )
    )
    m.add_artifact(
        ArtifactRecord(
            file_name="clip.mp4",
            file_size=42,
            relative_path="clip.mp4",
            original_path="clip.mp4",
            kind=ArtifactKind.VIDEO,
        )
    )
    return m


@pytest.fixture
def saved_project(tmp_path, manifest):
    project_dir = tmp_path / "bundle"
    project_dir.mkdir()
    path = save_manifest(manifest, project_dir)
    return path, project_dir


class TestProjectManifest:
    """Tests for the manifest model."""

    def test_document_keys(self, manifest):
        doc = manifest.to_document()
        assert list(doc) == ["projectName", "displayName", "originalZipPath", "createdDate", "files"]
        assert doc["files"][0]["type"] == "BUGREPORT"
        assert doc["files"][0]["splitParts"][0] == "bugreport_sub1.txt"
        assert doc["files"][1]["splitParts"] is None

    def test_label(self, manifest):
        assert manifest.label == "bundle"
        manifest.display_name = "Pixel crash"
        assert manifest.label == "Pixel crash"

    def test_created_at_defaults_to_now(self):
        m = ProjectManifest(project_name="x", archive_path="/x.zip")
        assert m.created_at_ms > 1_600_000_000_000

    def test_find_artifact(self, manifest):
        assert manifest.find_artifact("clip.mp4").kind == ArtifactKind.VIDEO
        assert manifest.find_artifact("nope.txt") is None


class TestPersistence:
    """Tests for save/load."""

    def test_round_trip(self, saved_project, manifest):
        path, _ = saved_project
        assert path.name == "bundle.json"
        assert load_manifest(path) == manifest

    def test_loads_existing_document(self, tmp_path):
        path = tmp_path / "old.json"
        path.write_text(
            json.dumps(
                {
                    "projectName": "old",
                    "originalZipPath": "/tmp/old.zip",
                    "createdDate": 1,
                    "files": [
                        {
                            "fileName": "bugreport.txt",
                            "fileSize": 3,
                            "relativePath": "bugreport.txt",
                            "originalPath": "bugreport.txt",
                            "type": "BUGREPORT",
                        }
                    ],
                }
            )
        )

        loaded = load_manifest(path)

        assert loaded.display_name is None
        assert loaded.artifacts[0].segments is None
        assert not loaded.artifacts[0].is_segmented

    def test_malformed_document(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            load_manifest(path)

    def test_missing_document(self, tmp_path):
        with pytest.raises(PersistenceError):
            load_manifest(tmp_path / "missing.json")

    def test_unwritable_directory(self, tmp_path, manifest):
        with pytest.raises(PersistenceError):
            save_manifest(manifest, tmp_path / "does-not-exist")


class TestProjectDirResolution:
    """Tests for current and legacy layouts."""

    def test_current_layout(self, saved_project, manifest):
        path, project_dir = saved_project
        assert resolve_project_dir(path, manifest) == project_dir.resolve()

    def test_legacy_layout(self, tmp_path, manifest):
        (tmp_path / "bundle").mkdir()
        legacy_path = save_manifest(manifest, tmp_path)

        loaded, project_dir = open_project(legacy_path)

        assert loaded.project_name == "bundle"
        assert project_dir == (tmp_path / "bundle").resolve()


class TestRenameProject:
    """Tests for rename_project."""

    def test_sets_display_name(self, saved_project):
        path, _ = saved_project

        renamed = rename_project(path, "  Pixel 8 crash  ")

        assert renamed.display_name == "Pixel 8 crash"
        assert load_manifest(path).display_name == "Pixel 8 crash"
        assert load_manifest(path).project_name == "bundle"

    def test_blank_name_rejected(self, saved_project):
        path, _ = saved_project
        with pytest.raises(ValueError):
            rename_project(path, "   ")


class TestDeleteProject:
    """Tests for delete_project."""

    def test_removes_directory_and_manifest(self, saved_project):
        path, project_dir = saved_project
        (project_dir / "bugreport.txt").write_text("x")

        removed = delete_project(path, protected=[])

        assert removed == project_dir.resolve()
        assert not project_dir.exists()
        assert not path.exists()

    def test_legacy_layout_removes_both(self, tmp_path, manifest):
        project_dir = tmp_path / "bundle"
        project_dir.mkdir()
        legacy_path = save_manifest(manifest, tmp_path)

        delete_project(legacy_path, protected=[])

        assert not project_dir.exists()
        assert not legacy_path.exists()

    def test_protected_directory(self, saved_project):
        path, project_dir = saved_project

        with pytest.raises(ProtectedPathError):
            delete_project(path, protected=[project_dir])

        assert project_dir.exists()
        assert path.exists()
