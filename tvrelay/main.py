import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tvrelay.core.config import VALID_LOG_LEVELS, Settings, settings
from tvrelay.core.errors import RelayError
from tvrelay.exchange.mexc.client import MexcFuturesClient
from tvrelay.state.registry import TradeStateRegistry
from tvrelay.webhook.dispatcher import WebhookDispatcher

log = logging.getLogger("tvrelay.main")


def configure_logging(level: str = "INFO") -> None:
    level = level if level in VALID_LOG_LEVELS else "INFO"
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_client(cfg: Settings) -> MexcFuturesClient:
    return MexcFuturesClient(
        api_key=cfg.MEXC_API_KEY,
        api_secret=cfg.MEXC_API_SECRET,
        enable_rate_limit=cfg.ENABLE_RATE_LIMIT,
        quote_currency=cfg.QUOTE_CURRENCY,
    )


def create_app(
    cfg: Settings | None = None,
    client=None,
    registry: TradeStateRegistry | None = None,
) -> FastAPI:
    cfg = cfg or settings
    client = client if client is not None else build_client(cfg)
    registry = registry if registry is not None else TradeStateRegistry()

    app = FastAPI(
        title="TradingView Mean-Reversion Relay",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = cfg
    app.state.client = client
    app.state.registry = registry
    app.state.dispatcher = WebhookDispatcher(
        client, registry, quote_currency=cfg.QUOTE_CURRENCY
    )

    @app.on_event("startup")
    async def _startup_validate_config():
        """Fail-fast config validation at startup."""
        for w in cfg.validate_runtime():
            log.warning("[CONFIG WARNING] %s", w)
        log.info("config: %s", cfg.public_dict())

    @app.on_event("startup")
    async def _startup_log_balance():
        # not guarded: a failing balance fetch stops startup
        await client.fetch_and_log_balance(cfg.BALANCE_ACCOUNT_TYPE)
        log.info("Server started on port %s", cfg.PORT)

    @app.on_event("shutdown")
    async def _shutdown_close_client():
        await client.close()

    @app.exception_handler(StarletteHTTPException)
    async def _not_found(request: Request, exc: StarletteHTTPException):
        # wrong path and wrong method on the alert path both read as 404
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.post(cfg.ALERT_PATH, response_class=PlainTextResponse)
    async def tradingview_alert(request: Request):
        body = await request.body()
        try:
            await app.state.dispatcher.handle(body)
        except RelayError as e:
            if e.status_code >= 500:
                log.exception("Error handling request")
            else:
                log.warning("alert rejected: %s (%s)", e.public_message, e)
            return PlainTextResponse(e.response_text(), status_code=e.status_code)
        except Exception as e:
            log.exception("Error handling request")
            return PlainTextResponse(f"Error: {e}", status_code=500)

        return PlainTextResponse("Request handled successfully")

    return app


app = create_app()


def run() -> None:
    level = settings.LOG_LEVEL if settings.LOG_LEVEL in VALID_LOG_LEVELS else "INFO"
    configure_logging(level)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=level.lower())


if __name__ == "__main__":
    run()
