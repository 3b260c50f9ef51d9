"""Unit tests for project context detection."""

import json
from pathlib import Path

from protocols_mcp.context_detector import (
    describe_context,
    detect_project_context,
    get_relevant_tags,
)
from protocols_mcp.models import ProjectContext


def _write_package_json(root: Path, **sections) -> None:
    (root / "package.json").write_text(json.dumps(sections))


class TestNodeDetection:
    """Tests for package.json detection."""

    def test_react_typescript_project(self, tmp_path: Path):
        """React + TypeScript + Jest with yarn."""
        _write_package_json(
            tmp_path,
            dependencies={"react": "^18.0.0"},
            devDependencies={"typescript": "^5.0.0", "jest": "^29.0.0"},
        )
        (tmp_path / "yarn.lock").write_text("")

        context = detect_project_context(tmp_path)

        assert context.detected is True
        assert context.language == "typescript"
        assert context.framework == "react"
        assert context.project_type == "frontend"
        assert context.test_framework == "jest"
        assert context.package_manager == "yarn"
        assert context.dependencies == ["react"]
        assert context.dev_dependencies == ["typescript", "jest"]

    def test_express_backend(self, tmp_path: Path):
        """Express apps are JavaScript backends."""
        _write_package_json(
            tmp_path,
            dependencies={"express": "^4.0.0"},
            devDependencies={"vitest": "^1.0.0"},
        )
        (tmp_path / "pnpm-lock.yaml").write_text("")

        context = detect_project_context(tmp_path)

        assert context.language == "javascript"
        assert context.framework == "express"
        assert context.project_type == "backend"
        assert context.test_framework == "vitest"
        assert context.package_manager == "pnpm"

    def test_no_dependencies_is_fullstack(self, tmp_path: Path):
        """A package.json without dependencies is treated as fullstack."""
        _write_package_json(tmp_path)

        context = detect_project_context(tmp_path)

        assert context.project_type == "fullstack"
        assert context.package_manager == "npm"

    def test_malformed_package_json_ignored(self, tmp_path: Path):
        """Unparseable package.json does not stop detection."""
        (tmp_path / "package.json").write_text("{not json")
        (tmp_path / "requirements.txt").write_text("requests\n")

        context = detect_project_context(tmp_path)

        assert context.language == "python"

    def test_non_object_dependencies_ignored(self, tmp_path: Path):
        """Dependency sections that are not objects are treated as empty."""
        _write_package_json(
            tmp_path, dependencies=["react"], devDependencies="typescript"
        )

        context = detect_project_context(tmp_path)

        assert context.detected is True
        assert context.language == "javascript"
        assert context.project_type == "fullstack"
        assert context.dependencies == []
        assert context.dev_dependencies == []


class TestUnreadableManifests:
    """Tests for manifests that cannot be parsed."""

    def test_non_utf8_pyproject(self, tmp_path: Path):
        """A pyproject.toml that is not UTF-8 leaves the default context."""
        (tmp_path / "pyproject.toml").write_bytes(b"[project]\n\xff\xfe django\n")

        assert detect_project_context(tmp_path) == ProjectContext()

    def test_unexpected_error_gives_default(self, tmp_path: Path, monkeypatch, caplog):
        """Any failure during detection is logged and yields the default context."""
        (tmp_path / "go.mod").write_text("module x\n")

        def _explode(root, context):
            raise TypeError("bad manifest")

        monkeypatch.setattr("protocols_mcp.context_detector._detect_node", _explode)

        assert detect_project_context(tmp_path) == ProjectContext()
        assert "bad manifest" in caplog.text


class TestOtherLanguages:
    """Tests for non-Node manifests."""

    def test_pyproject(self, tmp_path: Path):
        """pyproject.toml with FastAPI and pytest."""
        (tmp_path / "pyproject.toml").write_text(
            '[project]\ndependencies = ["fastapi"]\n\n[tool.pytest.ini_options]\n'
        )

        context = detect_project_context(tmp_path)

        assert context.language == "python"
        assert context.framework == "fastapi"
        assert context.test_framework == "pytest"
        assert context.project_type == "backend"

    def test_requirements_txt(self, tmp_path: Path):
        """requirements.txt alone marks a Python backend."""
        (tmp_path / "requirements.txt").write_text("flask\n")

        context = detect_project_context(tmp_path)

        assert context.language == "python"
        assert context.framework == "unknown"

    def test_go(self, tmp_path: Path):
        """go.mod marks a Go backend."""
        (tmp_path / "go.mod").write_text("module example.com/app\n")

        context = detect_project_context(tmp_path)

        assert context.language == "go"
        assert context.test_framework == "go-test"

    def test_rust(self, tmp_path: Path):
        """Cargo.toml marks a Rust backend."""
        (tmp_path / "Cargo.toml").write_text("[package]\n")

        context = detect_project_context(tmp_path)

        assert context.language == "rust"
        assert context.package_manager == "cargo"

    def test_java(self, tmp_path: Path):
        """pom.xml marks a Maven project without assuming a framework."""
        (tmp_path / "pom.xml").write_text("<project/>")

        context = detect_project_context(tmp_path)

        assert context.language == "java"
        assert context.framework == "none"

    def test_first_manifest_wins(self, tmp_path: Path):
        """package.json is checked before Python manifests."""
        _write_package_json(tmp_path, dependencies={"vue": "^3.0.0"})
        (tmp_path / "requirements.txt").write_text("django\n")

        context = detect_project_context(tmp_path)

        assert context.language == "javascript"
        assert context.framework == "vue"


class TestInfrastructureMarkers:
    """Tests for Docker, CI and git markers."""

    def test_dockerfile_only(self, tmp_path: Path):
        """A Dockerfile alone makes a devops project but no detected stack."""
        (tmp_path / "Dockerfile").write_text("FROM python:3.12\n")

        context = detect_project_context(tmp_path)

        assert context.has_docker is True
        assert context.project_type == "devops"
        assert context.detected is False

    def test_ci_and_git(self, tmp_path: Path):
        """GitHub workflows and .git are recorded."""
        (tmp_path / ".github" / "workflows").mkdir(parents=True)
        (tmp_path / ".git").mkdir()
        (tmp_path / "go.mod").write_text("module x\n")

        context = detect_project_context(tmp_path)

        assert context.has_ci is True
        assert context.has_git is True

    def test_other_ci_markers(self, tmp_path: Path):
        """Jenkinsfile counts as CI."""
        (tmp_path / "Jenkinsfile").write_text("pipeline {}\n")

        assert detect_project_context(tmp_path).has_ci is True

    def test_empty_directory(self, tmp_path: Path):
        """Nothing recognizable gives the default context."""
        assert detect_project_context(tmp_path) == ProjectContext()

    def test_missing_directory(self, tmp_path: Path):
        """A missing directory gives the default context."""
        assert detect_project_context(tmp_path / "missing").detected is False


class TestDescribeContext:
    """Tests for describe_context."""

    def test_undetected(self):
        """Undetected contexts have a fixed description."""
        assert describe_context(ProjectContext()) == "No project context detected"

    def test_detected(self):
        """Known fields are listed in order."""
        context = ProjectContext(
            language="python",
            framework="django",
            project_type="backend",
            test_framework="pytest",
            has_docker=True,
            detected=True,
        )

        assert describe_context(context) == (
            "Language: python, Framework: django, Type: backend, "
            "Tests: pytest, Has Docker"
        )

    def test_framework_none_omitted(self):
        """A 'none' framework is not described."""
        context = ProjectContext(language="java", framework="none", detected=True)

        assert describe_context(context) == "Language: java"


class TestGetRelevantTags:
    """Tests for get_relevant_tags."""

    def test_react_frontend(self):
        """Frontend React projects get UI tags."""
        context = ProjectContext(
            language="typescript", framework="react", project_type="frontend"
        )

        assert get_relevant_tags(context) == [
            "frontend",
            "ui-ux",
            "accessibility",
            "javascript",
            "typescript",
            "node",
            "react",
            "component",
        ]

    def test_backend_with_infrastructure(self):
        """Docker and CI add devops tags."""
        context = ProjectContext(
            language="go", project_type="backend", has_docker=True, has_ci=True
        )

        assert get_relevant_tags(context) == [
            "backend",
            "api",
            "database",
            "go",
            "golang",
            "docker",
            "devops",
            "ci-cd",
            "automation",
        ]

    def test_default_context(self):
        """The default context has no relevant tags."""
        assert get_relevant_tags(ProjectContext()) == []
