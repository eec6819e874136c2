"""npm registry version resolution."""

import asyncio
import logging
from collections.abc import Iterable
from urllib.parse import quote

import httpx

from .config import DEFAULT_REGISTRY_URL
from .errors import RegistryError

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_DELAY = 0.5  # seconds between batches


class NpmResolver:
    """Resolver for the latest published version of npm packages."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = 30.0,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize npm resolver.

        Args:
            registry_url: Base URL of the npm registry
            timeout: Request timeout in seconds
            batch_size: Number of lookups running at once
            batch_delay: Pause between batches in seconds
            client: Optional pre-built HTTP client (not closed by the resolver)
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._client = client

    def package_url(self, package_name: str) -> str:
        """Registry URL for a package; scoped names keep their ``@``."""
        return f"{self.registry_url}/{quote(package_name, safe='@')}"

    async def get_latest_version(self, package_name: str) -> str:
        """Get latest version for a package.

        Args:
            package_name: Name of the package

        Returns:
            Version tagged ``latest`` in the registry

        Raises:
            RegistryError: If the lookup fails for any reason
        """
        if self._client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._fetch_latest(client, package_name)
        return await self._fetch_latest(self._client, package_name)

    async def fetch_latest(self, package_names: Iterable[str]) -> dict[str, str | None]:
        """Fetch latest versions for many packages in throttled batches.

        Lookups in a batch run concurrently, batches run one after another
        with a pause between them. A failed lookup maps to None and never
        affects the other lookups.

        Args:
            package_names: Names of the packages

        Returns:
            Package name to latest version, None where the lookup failed
        """
        names = list(dict.fromkeys(package_names))
        if not names:
            return {}

        if self._client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._fetch_batches(client, names)
        return await self._fetch_batches(self._client, names)

    async def _fetch_batches(
        self, client: httpx.AsyncClient, names: list[str]
    ) -> dict[str, str | None]:
        latest_versions: dict[str, str | None] = {}

        for start in range(0, len(names), self.batch_size):
            batch = names[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._fetch_latest(client, name) for name in batch),
                return_exceptions=True,
            )

            for name, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.warning("Failed to fetch info for %s: %s", name, result)
                    latest_versions[name] = None
                else:
                    latest_versions[name] = result

            # Be polite to the registry between batches
            if start + self.batch_size < len(names):
                await asyncio.sleep(self.batch_delay)

        return latest_versions

    async def _fetch_latest(self, client: httpx.AsyncClient, package_name: str) -> str:
        url = self.package_url(package_name)
        logger.debug("GET %s", url)

        try:
            response = await client.get(url)
            response.raise_for_status()
            metadata = response.json()
        except httpx.TimeoutException as e:
            raise RegistryError(f"Timeout fetching metadata for {package_name}") from e
        except httpx.HTTPStatusError as e:
            raise RegistryError(
                f"HTTP {e.response.status_code} fetching {package_name}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RegistryError(f"Network error fetching {package_name}: {e}") from e

        latest = metadata.get("dist-tags", {}).get("latest") if isinstance(metadata, dict) else None
        if not latest:
            raise RegistryError(f"No latest version published for {package_name}")
        return str(latest)
