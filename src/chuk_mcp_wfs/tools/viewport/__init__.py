from .api import register_viewport_tools

__all__ = ["register_viewport_tools"]
