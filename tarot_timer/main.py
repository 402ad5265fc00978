import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tarot_timer import config
from tarot_timer.deck import JsonDeckProvider
from tarot_timer.errors import TarotTimerError
from tarot_timer.routes.deck_routes import router as deck_router
from tarot_timer.routes.session_routes import router as session_router
from tarot_timer.session_store import SessionStore
from tarot_timer.spreads import SpreadLayoutRegistry

log = logging.getLogger("tarot_timer.main")


def build_store() -> SessionStore:
    decks = JsonDeckProvider(config.deck_dir())
    registry = SpreadLayoutRegistry.from_json(config.spreads_path())
    registry.default_id = config.default_spread_id()
    return SessionStore(decks, registry)


def create_app(store: Optional[SessionStore] = None) -> FastAPI:
    app = FastAPI(title="Tarot Timer Draw Engine", version="0.1.0")
    app.state.store = store or build_store()

    app.include_router(deck_router)
    app.include_router(session_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TarotTimerError)
    async def tarot_error_handler(request: Request, exc: TarotTimerError):
        log.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


config.configure_logging()
app = create_app()
