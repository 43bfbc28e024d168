"""
WFS GetFeature client.

Builds OGC WFS 2.0 GetFeature URLs and fetches GeoJSON feature collections
over httpx. Cancelling the calling task aborts the HTTP request. There are
no retries: a failed request is reported once and the next viewport settle
tries again.
"""

import logging
from typing import Any, Sequence
from urllib.parse import urlencode

import httpx

from ..constants import (
    DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_SRS,
    WFS_BASE_URL,
    WFS_OUTPUT_FORMAT,
    WFS_REQUEST,
    WFS_SERVICE,
    WFS_VERSION,
    ErrorMessages,
)

logger = logging.getLogger(__name__)


class FeatureFetchError(Exception):
    """Base class for failures fetching a feature collection."""


class FeatureServiceError(FeatureFetchError):
    """The service answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeatureTransportError(FeatureFetchError):
    """The request never produced a response (DNS, connect, read, timeout)."""


class FeatureParseError(FeatureFetchError):
    """The response body was not a GeoJSON FeatureCollection."""


def build_wfs_params(
    type_name: str,
    bbox: Sequence[float] | None = None,
    max_features: int | None = None,
    srs_name: str = DEFAULT_SRS,
) -> dict[str, str]:
    """Assemble GetFeature query parameters in protocol order."""
    params = {
        "service": WFS_SERVICE,
        "version": WFS_VERSION,
        "request": WFS_REQUEST,
        "typeName": type_name,
        "outputFormat": WFS_OUTPUT_FORMAT,
        "srsName": srs_name,
    }
    if max_features is not None:
        params["count"] = str(max_features)
    if bbox is not None:
        params["bbox"] = f"{','.join(str(v) for v in bbox)},{srs_name}"
    return params


def build_wfs_url(
    type_name: str,
    bbox: Sequence[float] | None = None,
    max_features: int | None = None,
    srs_name: str = DEFAULT_SRS,
    base_url: str = WFS_BASE_URL,
) -> str:
    """Build a full GetFeature URL."""
    params = build_wfs_params(type_name, bbox, max_features, srs_name)
    return f"{base_url}?{urlencode(params)}"


class WFSClient:
    """Async GetFeature client with a lazily created, reusable httpx client."""

    def __init__(
        self,
        base_url: str = WFS_BASE_URL,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        max_features: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.max_features = max_features
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_s),
                transport=self._transport,
            )
        return self._client

    async def fetch_features(
        self,
        type_name: str,
        bbox: Sequence[float] | None = None,
    ) -> dict[str, Any]:
        """
        Fetch a feature collection for a layer and bounding box.

        Args:
            type_name: WFS layer name (e.g. global3D:lod1_global)
            bbox: Optional [west, south, east, north] in EPSG:4326

        Returns:
            Parsed GeoJSON FeatureCollection

        Raises:
            FeatureServiceError: non-2xx response
            FeatureTransportError: network failure or timeout
            FeatureParseError: body is not a FeatureCollection
        """
        url = build_wfs_url(type_name, bbox, self.max_features, base_url=self.base_url)
        logger.info(f"WFS GetFeature {type_name} bbox={list(bbox) if bbox else None}")

        try:
            response = await self._get_client().get(url)
        except httpx.RequestError as e:
            raise FeatureTransportError(ErrorMessages.TRANSPORT_ERROR.format(e)) from e

        if not response.is_success:
            raise FeatureServiceError(
                ErrorMessages.HTTP_ERROR.format(response.status_code, response.reason_phrase),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FeatureParseError(ErrorMessages.PARSE_ERROR.format(e)) from e

        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            found = data.get("type") if isinstance(data, dict) else type(data).__name__
            raise FeatureParseError(ErrorMessages.NOT_A_FEATURE_COLLECTION.format(found))
        if not isinstance(data.get("features"), list):
            raise FeatureParseError(ErrorMessages.PARSE_ERROR.format("missing 'features' array"))

        return data

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
