"""Application state: server config and the recommendation engine."""

from typing import Optional

from playlist_recs import RecsEngine

from .config import ServerConfig, get_config


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig, engine: Optional[RecsEngine] = None):
        self.config = config
        if engine is None:
            engine = self._create_engine(config)
        self.engine = engine

    def _create_engine(self, config: ServerConfig) -> RecsEngine:
        """Open the edge store when the feature flag is on, else a disabled engine."""
        if not config.recs_enabled:
            print("[startup] Recommendations disabled (RECS_ENABLED not set)")
            return RecsEngine(enabled=False)
        recs_config = config.load_recs_config()
        engine = RecsEngine.open(enabled=True, db_path=config.recs_db_path, config=recs_config)
        print(f"[startup] Recs store: {config.recs_db_path}")
        return engine

    @property
    def enabled(self) -> bool:
        return self.engine.enabled

    def close(self) -> None:
        self.engine.close()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: AppState) -> None:
    """Install a prebuilt state (used by tests and embedding hosts)."""
    global _state
    _state = state


def reset_state() -> None:
    """Close and forget the current state; the next get_state() rebuilds it."""
    global _state
    if _state is not None:
        _state.close()
    _state = None
