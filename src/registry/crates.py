"""crates.io registry client: answers which versions of a crate exist."""
from __future__ import annotations

import logging
import os
import urllib.parse
from typing import Any, Dict, List, Optional

import semantic_version

from constants import Constants
from common.http_client import HttpClientError, get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from errors import NoMatchingVersion, RegistryError
from versioning.models import Requirement

logger = logging.getLogger(__name__)


def _parse_version(raw: Any) -> Optional[semantic_version.Version]:
    if not isinstance(raw, str):
        return None
    try:
        return semantic_version.Version(raw)
    except ValueError:
        return None


class CratesRegistry:
    """Version oracle backed by the crates.io HTTP API.

    Retries and response caching are handled by ``common.http_client``.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (
            base_url
            or os.environ.get(Constants.ENV_REGISTRY_URL)
            or Constants.REGISTRY_URL_CRATES
        ).rstrip("/")

    def crate_url(self, crate_name: str) -> str:
        """API URL for a crate's metadata."""
        encoded = urllib.parse.quote(crate_name, safe="")
        return f"{self.base_url}{Constants.CRATES_API_PATH}{encoded}"

    def _fetch_crate(self, crate_name: str) -> Dict[str, Any]:
        url = self.crate_url(crate_name)
        with Timer() as timer:
            try:
                status_code, _, data = get_json(url, headers={"Accept": "application/json"})
            except HttpClientError as exc:
                raise RegistryError(
                    f"failed to query registry for '{crate_name}'", crate=crate_name
                ) from exc

        if is_debug_enabled(logger):
            logger.debug(
                "Registry lookup",
                extra=extra_context(
                    event="registry_lookup",
                    component="crates",
                    crate=crate_name,
                    status_code=status_code,
                    duration_ms=timer.duration_ms(),
                    target=safe_url(url)
                )
            )

        if status_code == 404:
            raise RegistryError(f"crate '{crate_name}' not found in registry", crate=crate_name)
        if status_code != 200:
            raise RegistryError(
                f"registry returned HTTP {status_code} for '{crate_name}'", crate=crate_name
            )
        if not isinstance(data, dict):
            raise RegistryError(
                f"registry returned malformed data for '{crate_name}'", crate=crate_name
            )
        return data

    @staticmethod
    def _published_versions(data: Dict[str, Any]) -> List[semantic_version.Version]:
        """Non-yanked, parseable versions listed in a crate payload."""
        versions = []
        for item in data.get("versions") or []:
            if not isinstance(item, dict) or item.get("yanked"):
                continue
            version = _parse_version(item.get("num"))
            if version is not None:
                versions.append(version)
        return versions

    def latest_version(self, crate_name: str) -> semantic_version.Version:
        """Newest release of ``crate_name``, preferring stable releases.

        Raises:
            RegistryError: On transport failure, unknown crate or bad payload.
        """
        data = self._fetch_crate(crate_name)
        crate = data.get("crate")
        if isinstance(crate, dict):
            for key in ("max_stable_version", "max_version"):
                version = _parse_version(crate.get(key))
                if version is not None:
                    logger.info("Latest version of %s is %s", crate_name, version)
                    return version

        published = self._published_versions(data)
        stable = [v for v in published if not v.prerelease]
        candidates = stable or published
        if not candidates:
            raise RegistryError(
                f"registry lists no usable versions for '{crate_name}'", crate=crate_name
            )
        version = max(candidates)
        logger.info("Latest version of %s is %s", crate_name, version)
        return version

    def highest_matching_version(self, crate_name: str,
                                 requirement: Requirement) -> semantic_version.Version:
        """Highest non-yanked release of ``crate_name`` satisfying ``requirement``.

        Raises:
            RegistryError: On transport failure, unknown crate or bad payload.
            NoMatchingVersion: If no published version satisfies the requirement.
        """
        data = self._fetch_crate(crate_name)
        matching = [v for v in self._published_versions(data) if requirement.matches(v)]
        if not matching:
            raise NoMatchingVersion(crate_name, str(requirement))
        version = max(matching)
        logger.info("Resolved %s@%s to %s", crate_name, requirement, version)
        return version
