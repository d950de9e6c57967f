from typing import Optional

from fastapi import FastAPI
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from plausible_proxy.config import ProxyConfig
from plausible_proxy.middleware import PlausibleProxyMiddleware
from plausible_proxy.vars import SERVICE_NAME


def create_app(config: Optional[ProxyConfig] = None, transport=None) -> FastAPI:
    app = FastAPI()
    Instrumentator().instrument(app).expose(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.add_middleware(
        PlausibleProxyMiddleware,
        config=config if config is not None else ProxyConfig.from_env(),
        transport=transport,
    )
    return app


app = create_app()

# Add app_name to the metrics
app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})
