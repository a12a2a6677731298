from .api_routes import router as api_router
from .graph_routes import router as graph_router
from .layer_routes import router as layer_router

__all__ = ["api_router", "graph_router", "layer_router"]
