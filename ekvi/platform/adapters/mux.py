"""
Mux Video REST client.

Only the two calls the application needs: creating a direct upload and deleting
an asset. Clients are cheap and stateless; build one per operation with
``create_mux_client`` instead of holding a process-wide instance.
"""
import logging
import httpx
from ekvi.core.exceptions import ConfigurationError, UpstreamError
from ekvi.platform.ports.video_provider import DirectUpload, VideoProviderPort

logger = logging.getLogger(__name__)


class MuxConfigurationError(ConfigurationError):
    pass


class MuxAPIError(UpstreamError):
    pass


def _error_message(response: httpx.Response) -> str:
    # Mux error bodies look like {"error": {"type": "...", "messages": ["..."]}}
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        messages = err.get("messages") or []
        if messages:
            return str(messages[0])
        if err.get("type"):
            return str(err["type"])
    return f"HTTP {response.status_code}"


class MuxClient(VideoProviderPort):
    def __init__(
        self,
        token_id: str,
        token_secret: str,
        *,
        base_url: str = "https://api.mux.com",
        video_quality: str = "plus",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_id = token_id
        self.token_secret = token_secret
        self.base_url = base_url.rstrip("/")
        self.video_quality = video_quality
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.token_id, self.token_secret),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise MuxAPIError(_error_message(e.response)) from e
        except httpx.RequestError as e:
            raise MuxAPIError(f"Mux request failed: {e}") from e

    async def create_direct_upload(self, cors_origin: str = "*") -> DirectUpload:
        response = await self._request(
            "POST",
            "/video/v1/uploads",
            json={
                "new_asset_settings": {
                    "playback_policy": ["public"],
                    "video_quality": self.video_quality,
                },
                "cors_origin": cors_origin,
            },
        )
        data = response.json().get("data") or {}
        if not data.get("id") or not data.get("url"):
            raise MuxAPIError("Mux response missing upload id or url")
        logger.info(f"Created Mux direct upload {data['id']}")
        return DirectUpload(id=data["id"], url=data["url"])

    async def delete_asset(self, asset_id: str) -> None:
        await self._request("DELETE", f"/video/v1/assets/{asset_id}")
        logger.info(f"Deleted Mux asset {asset_id}")


def create_mux_client(
    token_id: str | None,
    token_secret: str | None,
    *,
    base_url: str = "https://api.mux.com",
    video_quality: str = "plus",
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MuxClient:
    if not (token_id and token_secret):
        raise MuxConfigurationError(
            "Mux credentials not configured. Set MUX_TOKEN_ID and MUX_TOKEN_SECRET environment variables."
        )
    return MuxClient(
        token_id,
        token_secret,
        base_url=base_url,
        video_quality=video_quality,
        timeout=timeout,
        transport=transport,
    )
