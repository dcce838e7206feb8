"""
Playlist Recommendations API: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import register_routes
from .state import get_state, reset_state


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup/shutdown hooks."""
    app = FastAPI(
        title="Playlist Recommendations API",
        description="Graph-based track recommendations from observed playlist orderings",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup():
        state = get_state()
        if state.enabled:
            status = state.engine.migration_status()
            print(
                f"[startup] Recs schema at v{status.current_version} "
                f"(latest v{status.latest_version}, pending {status.pending_count})"
            )
        print(f"[startup] Playlist Recommendations API ready. enabled={state.enabled}")

    @app.on_event("shutdown")
    def _shutdown():
        reset_state()
        print("[shutdown] Recs store closed")

    return app


app = create_app()
