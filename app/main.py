from __future__ import annotations

from fastapi.responses import RedirectResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api.v1.router import api_router
from app.core.config import create_app
from app.core.logging import configure_logging
from app.core.settings import settings

app = create_app()
configure_logging()

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs", status_code=302)


app.include_router(api_router, prefix=settings.API_V1_STR)
