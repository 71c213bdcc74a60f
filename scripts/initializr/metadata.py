"""Client for the project-generator service metadata.

Two endpoints are used:

* ``GET <serviceUrl>`` with the ``application/vnd.initializr.v2.2+json``
  media type returns the capabilities: boot versions, languages,
  packagings, Java versions and the grouped dependency catalog.
* ``GET <serviceUrl>/dependencies?bootVersion=<v>`` returns, for one boot
  version, the Maven coordinates of every starter and the BOMs they need.

Capability documents are cached per service URL for the life of the client.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from .errors import MetadataError
from .pom_models import Artifact, Bom
from .versions import match_range

logger = logging.getLogger(__name__)

METADATA_MEDIA_TYPE = "application/vnd.initializr.v2.2+json"
USER_AGENT = "spring-initializr-cli"


class MetadataType(Enum):
    """Sections of the capability document that back a pick step."""
    BOOT_VERSION = "bootVersion"
    LANGUAGE = "language"
    PACKAGING = "packaging"
    JAVA_VERSION = "javaVersion"


@dataclass(frozen=True)
class MetadataItem:
    """One pickable value of a metadata section."""
    id: str
    name: str
    is_default: bool = False


@dataclass(frozen=True)
class DependencyCatalogEntry:
    """One selectable dependency.

    Attributes:
        id: Unique key (e.g. ``web``).
        name: Display name (e.g. ``Spring Web``).
        group: Group label the service files it under (e.g. ``Web``).
        bom: Id of the BOM the dependency needs, if any.
        description: Short description shown next to the name.
        version_range: Boot versions the dependency supports.
    """
    id: str
    name: str
    group: Optional[str] = None
    bom: Optional[str] = None
    description: str = ""
    version_range: Optional[str] = None


@dataclass
class Starters:
    """Maven coordinates of every starter for one boot version."""
    dependencies: dict = field(default_factory=dict)
    boms: dict = field(default_factory=dict)


def _section_items(metadata: dict, metadata_type: MetadataType) -> list:
    section = metadata.get(metadata_type.value) or {}
    default = section.get("default")
    items = []
    for value in section.get("values", []):
        if not value.get("id"):
            continue
        items.append(MetadataItem(
            id=value["id"],
            name=value.get("name") or value["id"],
            is_default=value["id"] == default,
        ))
    # Metadata default first so accepting the first choice keeps it.
    items.sort(key=lambda item: not item.is_default)
    return items


def _catalog_entries(metadata: dict, boot_version: Optional[str]) -> list:
    entries = []
    for group in (metadata.get("dependencies") or {}).get("values", []):
        group_name = group.get("name")
        for dep in group.get("values", []):
            if not dep.get("id"):
                continue
            version_range = dep.get("versionRange")
            if boot_version and version_range:
                try:
                    if not match_range(boot_version, version_range):
                        continue
                except ValueError:
                    logger.debug("Keeping %s, unparsable range %r", dep.get("id"), version_range)
            entries.append(DependencyCatalogEntry(
                id=dep["id"],
                name=dep.get("name") or dep["id"],
                group=group_name,
                bom=dep.get("bom"),
                description=dep.get("description", ""),
                version_range=version_range,
            ))
    return entries


def _parse_starters(payload: dict) -> Starters:
    dependencies = {}
    for dep_id, dep in (payload.get("dependencies") or {}).items():
        if not dep.get("groupId") or not dep.get("artifactId"):
            logger.debug("Skipping starter %r without coordinates", dep_id)
            continue
        dependencies[dep_id] = Artifact(
            group_id=dep["groupId"],
            artifact_id=dep["artifactId"],
            version=dep.get("version"),
            scope=dep.get("scope"),
            bom=dep.get("bom"),
        )
    boms = {}
    for bom_id, bom in (payload.get("boms") or {}).items():
        if not all(bom.get(key) for key in ("groupId", "artifactId", "version")):
            logger.debug("Skipping BOM %r without coordinates", bom_id)
            continue
        boms[bom_id] = Bom(
            group_id=bom["groupId"],
            artifact_id=bom["artifactId"],
            version=bom["version"],
        )
    return Starters(dependencies=dependencies, boms=boms)


class ServiceManager:
    """Fetches and caches service metadata.

    Args:
        timeout: HTTP timeout in seconds.
        transport: Optional ``httpx`` transport, used by tests to serve
            canned responses.
    """

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport
        self._metadata: dict = {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def _get_json(self, url: str, params: Optional[dict] = None, accept: str = "application/json") -> dict:
        try:
            async with self._client() as client:
                response = await client.get(url, params=params, headers={"Accept": accept})
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise MetadataError(f"Unable to fetch metadata from {url}: {e}") from e
        except ValueError as e:
            raise MetadataError(f"Invalid metadata returned by {url}: {e}") from e

    async def get_metadata(self, service_url: str) -> dict:
        """Return the capability document of a service, fetching it once."""
        if service_url not in self._metadata:
            logger.info("Fetching metadata from %s", service_url)
            self._metadata[service_url] = await self._get_json(service_url, accept=METADATA_MEDIA_TYPE)
        else:
            logger.debug("Using cached metadata for %s", service_url)
        return self._metadata[service_url]

    async def get_items(self, service_url: str, metadata_type: MetadataType) -> list:
        """List the pickable values of one metadata section, default first."""
        return _section_items(await self.get_metadata(service_url), metadata_type)

    async def get_available_dependencies(self, service_url: str, boot_version: Optional[str]) -> list:
        """List the catalog entries compatible with ``boot_version``."""
        return _catalog_entries(await self.get_metadata(service_url), boot_version)

    async def get_starters(self, service_url: str, boot_version: str) -> Starters:
        """Fetch the starter coordinates and BOMs for one boot version."""
        url = service_url.rstrip("/") + "/dependencies"
        logger.info("Fetching starters for Spring Boot %s from %s", boot_version, url)
        payload = await self._get_json(url, params={"bootVersion": boot_version})
        return _parse_starters(payload)
