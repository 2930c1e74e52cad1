"""Core domain & services for Movie Night.

Rooms, their users and movie proposals, the store they live in, and the
random source used for join codes, tokens and the final pick.
"""

from .config import Settings  # noqa: F401
from .db import Store  # noqa: F401
