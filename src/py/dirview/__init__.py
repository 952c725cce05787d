from .model import Entity, FileType, classify, formatSize  # NOQA: F401
from .http import HTTPRequest, HTTPResponse  # NOQA: F401
from .config import Config, ConfigError  # NOQA: F401
from .browser import Browser, IOFailure  # NOQA: F401
from .server import run  # NOQA: F401


# EOF
