"""Shared test fixtures for the initializr test suite."""

import io
import textwrap
import zipfile
from pathlib import Path

import httpx
import pytest

from initializr.metadata import ServiceManager
from initializr.prompts import Prompter
from initializr.settings import Settings

SERVICE_URL = "https://start.example.test"

METADATA = {
    "bootVersion": {
        "default": "3.2.1",
        "values": [
            {"id": "3.3.0-SNAPSHOT", "name": "3.3.0 (SNAPSHOT)"},
            {"id": "3.2.1", "name": "3.2.1"},
            {"id": "2.7.18", "name": "2.7.18"},
        ],
    },
    "language": {
        "default": "java",
        "values": [
            {"id": "java", "name": "Java"},
            {"id": "kotlin", "name": "Kotlin"},
        ],
    },
    "packaging": {
        "default": "jar",
        "values": [
            {"id": "jar", "name": "Jar"},
            {"id": "war", "name": "War"},
        ],
    },
    "javaVersion": {
        "default": "17",
        "values": [
            {"id": "21", "name": "21"},
            {"id": "17", "name": "17"},
        ],
    },
    "dependencies": {
        "values": [
            {"name": "Web", "values": [
                {"id": "web", "name": "Spring Web"},
                {"id": "webflux", "name": "Spring Reactive Web"},
            ]},
            {"name": "SQL", "values": [
                {"id": "data-jpa", "name": "Spring Data JPA"},
                {"id": "legacy-sql", "name": "Legacy SQL", "versionRange": "[2.0.0,3.0.0-M1)"},
            ]},
            {"name": "Spring Cloud", "values": [
                {"id": "cloud-config-client", "name": "Config Client", "versionRange": "[3.0.0,3.3.0-M1)"},
            ]},
        ],
    },
}

STARTERS = {
    "bootVersion": "3.2.1",
    "dependencies": {
        "web": {"groupId": "org.springframework.boot", "artifactId": "spring-boot-starter-web"},
        "webflux": {"groupId": "org.springframework.boot", "artifactId": "spring-boot-starter-webflux"},
        "data-jpa": {"groupId": "org.springframework.boot", "artifactId": "spring-boot-starter-data-jpa"},
        "cloud-config-client": {
            "groupId": "org.springframework.cloud",
            "artifactId": "spring-cloud-starter-config",
            "bom": "spring-cloud",
        },
    },
    "boms": {
        "spring-cloud": {
            "groupId": "org.springframework.cloud",
            "artifactId": "spring-cloud-dependencies",
            "version": "2023.0.0",
        },
    },
}

ACCEPT_DEFAULT = object()


def make_zip(files: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


class ServiceStub:
    """Serves canned metadata, starters and archives; records requests."""

    def __init__(self, archive: bytes = b"", archive_status: int = 200):
        self.archive = archive
        self.archive_status = archive_status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/dependencies":
            return httpx.Response(200, json=STARTERS)
        if path == "/starter.zip":
            return httpx.Response(self.archive_status, content=self.archive)
        if path in ("", "/"):
            return httpx.Response(200, json=METADATA)
        return httpx.Response(404)


class ScriptedPrompter(Prompter):
    """Answers prompts from a script and records everything shown.

    Pick answers are item labels, input answers are strings; ``None``
    dismisses and ``ACCEPT_DEFAULT`` keeps the pre-filled input value.
    """

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.picks = []
        self.inputs = []
        self.infos = []
        self.warnings = []
        self.errors = []
        self.progress = []

    def _next(self):
        if not self.answers:
            raise AssertionError("Prompter ran out of scripted answers")
        return self.answers.pop(0)

    async def pick(self, items, title=None, placeholder=None):
        self.picks.append((items, placeholder))
        answer = self._next()
        if answer is None:
            return None
        for item in items:
            if not item.separator and item.label == answer:
                return item
        raise AssertionError(f"No item labelled {answer!r} in {[i.label for i in items]}")

    async def input_box(self, prompt, default="", placeholder=None):
        self.inputs.append((prompt, default))
        answer = self._next()
        if answer is ACCEPT_DEFAULT:
            return default
        return answer

    def show_info(self, message):
        self.infos.append(message)

    def show_warning(self, message):
        self.warnings.append(message)

    def show_error(self, message):
        self.errors.append(message)

    def report_progress(self, message):
        self.progress.append(message)


@pytest.fixture
def tmp_pom(tmp_path):
    """Factory fixture that writes a pom.xml to a temp directory and returns the path."""
    def _write(content: str, name: str = "pom.xml") -> Path:
        pom = tmp_path / name
        pom.parent.mkdir(parents=True, exist_ok=True)
        pom.write_text(textwrap.dedent(content), encoding="utf-8")
        return pom
    return _write


@pytest.fixture
def service_stub():
    return ServiceStub()


@pytest.fixture
def service(service_stub):
    """A real ServiceManager talking to the canned service."""
    return ServiceManager(transport=httpx.MockTransport(service_stub))


@pytest.fixture
def settings(tmp_path):
    return Settings(service_url=SERVICE_URL, storage_dir=tmp_path / "storage")
