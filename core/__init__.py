"""
Core business logic - transport-agnostic.
Used by the web API and the console command loop.
"""

# Configuration
from .config import Settings, load_settings

# Application context (explicit component wiring)
from .app_context import AppContext, create_app_context

# Participant store
from .queries.participants import Participant, ParticipantStore, StoreError

# Pairing
from .pairing import PairingEngine, PairingScheduler

__all__ = [
    'Settings', 'load_settings',
    'AppContext', 'create_app_context',
    'Participant', 'ParticipantStore', 'StoreError',
    'PairingEngine', 'PairingScheduler',
]
