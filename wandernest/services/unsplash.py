from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from wandernest.models import DestinationRecord, ImageResult

logger = logging.getLogger(__name__)


class UnsplashService:
    """Service for searching destination images on the Unsplash API."""

    BASE_URL = "https://api.unsplash.com"
    # Keyless "Source" endpoint used as a last-resort placeholder image.
    SOURCE_URL = "https://source.unsplash.com/1600x900/"

    def __init__(
        self,
        access_key: str,
        client: httpx.Client | None = None,
        per_page: int = 10,
        timeout: float = 10.0,
    ):
        self.access_key = access_key
        self.per_page = per_page
        self.timeout = timeout
        self._client = client

    def _fallback_images(self, query: str) -> list[ImageResult]:
        return [
            ImageResult(
                url=f"{self.SOURCE_URL}?{quote(query)},travel",
                alt=f"{query} travel photo",
                photographer="Unsplash",
                photographer_url="https://unsplash.com",
            )
        ]

    @staticmethod
    def _to_image(photo: dict, query: str) -> ImageResult | None:
        urls = photo.get("urls") or {}
        url = urls.get("regular") or urls.get("small")
        if not url:
            return None
        user = photo.get("user") or {}
        return ImageResult(
            url=url,
            alt=photo.get("alt_description") or f"{query} travel photo",
            photographer=user.get("name") or "Unsplash",
            photographer_url=(user.get("links") or {}).get("html") or "https://unsplash.com",
        )

    def _get(self, client: httpx.Client, query: str) -> httpx.Response:
        return client.get(
            f"{self.BASE_URL}/search/photos",
            params={
                "query": f"{query} travel",
                "orientation": "landscape",
                "per_page": self.per_page,
            },
            headers={"Authorization": f"Client-ID {self.access_key}"},
            timeout=self.timeout,
        )

    def search_images(self, query: str) -> list[ImageResult]:
        """
        Search for travel photos of a place.

        Args:
            query: Place to search for (e.g., "Kyoto Japan")

        Returns:
            Ranked images. Without an access key, or when Unsplash answers
            with an error status, a single Source-endpoint placeholder is
            returned; transport failures return an empty list.
        """
        query = query.strip()
        if not query:
            return []

        if not self.access_key:
            logger.warning("UNSPLASH_ACCESS_KEY not configured, using fallback image")
            return self._fallback_images(query)

        try:
            if self._client is not None:
                response = self._get(self._client, query)
            else:
                with httpx.Client() as client:
                    response = self._get(client, query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Unsplash API error %s for %r", e.response.status_code, query)
            return self._fallback_images(query)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Unsplash request for %r failed: %s", query, e)
            return []

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return self._fallback_images(query)

        images = [img for img in (self._to_image(p, query) for p in results) if img]
        return images or self._fallback_images(query)

    @staticmethod
    def is_fallback(image: ImageResult) -> bool:
        return "source.unsplash.com" in image.url

    def photo_for_destination(self, record: DestinationRecord) -> ImageResult | None:
        """
        Get the card photo for a destination.

        Returns:
            The first real Unsplash result with an https URL, or None when only
            a placeholder is available
        """
        images = self.search_images(record.to_image_query())
        if not images:
            logger.info("No Unsplash results for %s", record.name)
            return None

        first = images[0]
        url = first.url
        if url.startswith("http:"):
            url = "https:" + url[len("http:"):]
        if "unsplash.com" not in url or self.is_fallback(first):
            logger.debug("Skipping fallback image for %s", record.name)
            return None

        return first.model_copy(update={"url": url})
