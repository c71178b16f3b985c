from .user import User
from .device import Device
from .alert import Alert
from .threshold import Threshold
from .revoked_token import RevokedToken
from .rate_limit_entry import RateLimitEntry

__all__ = ['User', 'Device', 'Alert', 'Threshold', 'RevokedToken', 'RateLimitEntry']
