"""
Dashboard API routes.
"""
import logging
from flask import Blueprint, request

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


def get_json_body():
    """Request JSON as a dict, or None when missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# Import submodules to register routes on api_bp
from . import auth        # noqa: E402, F401
from . import user        # noqa: E402, F401
from . import devices     # noqa: E402, F401
from . import vitals      # noqa: E402, F401
from . import alerts      # noqa: E402, F401
from . import thresholds  # noqa: E402, F401
from . import patients    # noqa: E402, F401
