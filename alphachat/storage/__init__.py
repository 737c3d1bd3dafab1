"""Storage module - document storage and the record stores built on it."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .session_store import SessionStore, LocalSessionStore
from .user_storage import UserStorage
from .usage_ledger import UsageLedger

__all__ = ['StorageInterface', 'LocalStorage', 'SessionStore', 'LocalSessionStore', 'UserStorage', 'UsageLedger']
