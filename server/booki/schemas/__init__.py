"""Pydantic schemas for request/response validation."""

from .agency import *  # noqa: F403
from .auth import *  # noqa: F403
from .blog import *  # noqa: F403
from .booking import *  # noqa: F403
from .car import *  # noqa: F403
from .chat import *  # noqa: F403
from .common import *  # noqa: F403
from .dashboard import *  # noqa: F403
from .favorite import *  # noqa: F403
from .health import *  # noqa: F403
from .hotel import *  # noqa: F403
from .notification import *  # noqa: F403
from .payment import *  # noqa: F403
from .trip import *  # noqa: F403
from .user import *  # noqa: F403
from .wallet import *  # noqa: F403
