"""Application entrypoint for the HTTP API."""

from __future__ import annotations

from fastapi import FastAPI

from pipeline_crm.api.router import get_api_router
from pipeline_crm.core.config import get_config
from pipeline_crm.core.startup import bootstrap


def create_app() -> FastAPI:
    cfg = get_config()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION)
    app.include_router(get_api_router())

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


# Exposed for `uvicorn pipeline_crm.main:app`.
app = create_app()


def main() -> None:
    import uvicorn

    bootstrap()
    cfg = get_config()
    uvicorn.run(app, host=cfg.API_HOST, port=cfg.API_PORT)


if __name__ == "__main__":
    main()
