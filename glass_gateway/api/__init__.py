# Glass Gateway API Routers
from .glass import router as glass_router, soap_error_handler
from .proxy import router as proxy_router

__all__ = ["glass_router", "proxy_router", "soap_error_handler"]
