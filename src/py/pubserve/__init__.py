from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .config import ServeConfig, ConfigError  # NOQA: F401
from .decorators import on  # NOQA: F401
from .model import Application, Service, mount  # NOQA: F401
from .resolver import Asset, AssetResolver  # NOQA: F401
from .server import run  # NOQA: F401
from .services.static import StaticService  # NOQA: F401

__version__ = "1.0.0"

# EOF
