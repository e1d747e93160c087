from ekvi.core.config import settings
from ekvi.platform.ports.event_bus import EventBusPort
from ekvi.platform.adapters.bus_noop import NoopEventBus
from ekvi.platform.adapters.bus_redis import RedisEventBus
from ekvi.platform.ports.video_provider import VideoProviderPort
from ekvi.platform.adapters.mux import create_mux_client

class ProviderRegistry:
    _event_bus: EventBusPort | None = None

    @classmethod
    def event_bus(cls) -> EventBusPort:
        if cls._event_bus is None:
            prov = (settings.EVENT_BUS_PROVIDER or "noop").lower()
            if prov == "redis":
                cls._event_bus = RedisEventBus()
            else:
                cls._event_bus = NoopEventBus()
        return cls._event_bus

    @classmethod
    def video_provider(cls) -> VideoProviderPort:
        # built per call so credential changes apply without a restart
        return create_mux_client(
            settings.MUX_TOKEN_ID,
            settings.MUX_TOKEN_SECRET,
            base_url=settings.MUX_API_BASE_URL,
            video_quality=settings.MUX_VIDEO_QUALITY,
            timeout=settings.MUX_HTTP_TIMEOUT_SECONDS,
        )

registry = ProviderRegistry()
