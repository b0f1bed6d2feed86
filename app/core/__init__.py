from .config import CompletionProvider, ProviderKind, resolve_provider, settings
from .database import get_db, init_db

__all__ = ["settings", "get_db", "init_db", "CompletionProvider", "ProviderKind", "resolve_provider"]
