"""Project Context Detection

Scans a project directory for common manifest files and infers its
language, framework and project type. The result is only used to
re-rank search results, never to filter them.
"""

import json
import logging
from pathlib import Path

from .models import ProjectContext

logger = logging.getLogger(__name__)

FRONTEND_FRAMEWORKS = ("react", "vue", "svelte")
CI_MARKERS = (".gitlab-ci.yml", ".circleci", "Jenkinsfile")


def detect_project_context(root_path: Path | str) -> ProjectContext:
    """
    Detect project context by scanning for common files.

    Manifests are checked in order (package.json, pyproject.toml,
    requirements.txt, go.mod, Cargo.toml, pom.xml); the first one found
    decides the language.

    Args:
        root_path: Project root directory

    Returns:
        ProjectContext (detected=False when nothing was recognized)
    """
    root = Path(root_path)
    context = ProjectContext()

    try:
        _detect_node(root, context)

        if not context.detected:
            _detect_python(root, context)

        if not context.detected and (root / "go.mod").exists():
            context.language = "go"
            context.test_framework = "go-test"
            context.project_type = "backend"
            context.detected = True

        if not context.detected and (root / "Cargo.toml").exists():
            context.language = "rust"
            context.package_manager = "cargo"
            context.project_type = "backend"
            context.detected = True

        if not context.detected and (root / "pom.xml").exists():
            context.language = "java"
            context.package_manager = "maven"
            context.framework = "none"  # Maven alone does not imply Spring
            context.project_type = "backend"
            context.detected = True

        if (root / "Dockerfile").exists():
            context.has_docker = True
            if context.project_type == "unknown":
                context.project_type = "devops"

        if (root / ".github" / "workflows").exists() or any(
            (root / marker).exists() for marker in CI_MARKERS
        ):
            context.has_ci = True

        context.has_git = (root / ".git").exists()

    except Exception as e:
        logger.error(f"Error detecting project context in {root}: {e}", exc_info=True)
        return ProjectContext()

    logger.debug(f"Project context for {root}: {describe_context(context)}")
    return context


def _detect_node(root: Path, context: ProjectContext) -> None:
    package_json = root / "package.json"
    if not package_json.exists():
        return

    try:
        pkg = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable package.json in {root}: {e}")
        return
    if not isinstance(pkg, dict):
        return

    dependencies = _dependency_map(pkg, "dependencies")
    dev_dependencies = _dependency_map(pkg, "devDependencies")
    all_dependencies = {**dev_dependencies, **dependencies}

    context.package_manager = "npm"
    context.language = "typescript" if "typescript" in dev_dependencies else "javascript"

    frontend = next((fw for fw in FRONTEND_FRAMEWORKS if fw in all_dependencies), None)
    if frontend:
        context.framework = frontend
        context.project_type = "frontend"
    elif "express" in dependencies:
        context.framework = "express"
        context.project_type = "backend"
    elif all_dependencies:
        context.project_type = "backend"
    else:
        context.project_type = "fullstack"

    if "jest" in dev_dependencies:
        context.test_framework = "jest"
    elif "vitest" in dev_dependencies:
        context.test_framework = "vitest"

    if (root / "yarn.lock").exists():
        context.package_manager = "yarn"
    elif (root / "pnpm-lock.yaml").exists():
        context.package_manager = "pnpm"

    context.dependencies = list(dependencies)
    context.dev_dependencies = list(dev_dependencies)
    context.detected = True


def _dependency_map(pkg: dict, key: str) -> dict:
    value = pkg.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring non-object {key} in package.json")
        return {}
    return value


def _detect_python(root: Path, context: ProjectContext) -> None:
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8").lower()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable pyproject.toml in {root}: {e}")
            return
        context.language = "python"
        context.package_manager = "pip"
        context.project_type = "backend"
        if "django" in content:
            context.framework = "django"
        elif "fastapi" in content:
            context.framework = "fastapi"
        if "pytest" in content:
            context.test_framework = "pytest"
        context.detected = True
        return

    if (root / "requirements.txt").exists():
        context.language = "python"
        context.package_manager = "pip"
        context.project_type = "backend"
        context.detected = True


def describe_context(context: ProjectContext) -> str:
    """Human-readable one-line description of a context."""
    if not context.detected:
        return "No project context detected"

    parts = []
    if context.language != "unknown":
        parts.append(f"Language: {context.language}")
    if context.framework not in ("unknown", "none"):
        parts.append(f"Framework: {context.framework}")
    if context.project_type != "unknown":
        parts.append(f"Type: {context.project_type}")
    if context.test_framework != "unknown":
        parts.append(f"Tests: {context.test_framework}")
    if context.has_docker:
        parts.append("Has Docker")
    if context.has_ci:
        parts.append("Has CI/CD")
    return ", ".join(parts)


def get_relevant_tags(context: ProjectContext) -> list[str]:
    """Protocol tags relevant to a context (deduplicated, in order)."""
    tags: list[str] = []

    if context.project_type == "frontend":
        tags += ["frontend", "ui-ux", "accessibility"]
    elif context.project_type == "backend":
        tags += ["backend", "api", "database"]
    elif context.project_type == "fullstack":
        tags += ["fullstack", "integration"]

    if context.language in ("typescript", "javascript"):
        tags += ["javascript", "typescript", "node"]
    elif context.language == "python":
        tags.append("python")
    elif context.language == "go":
        tags += ["go", "golang"]
    elif context.language == "rust":
        tags.append("rust")

    if context.framework == "react":
        tags += ["react", "component"]
    elif context.framework == "vue":
        tags.append("vue")
    elif context.framework == "express":
        tags += ["express", "rest-api"]

    if context.has_docker:
        tags += ["docker", "devops"]
    if context.has_ci:
        tags += ["ci-cd", "automation"]

    return list(dict.fromkeys(tags))
