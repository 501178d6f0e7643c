from medmap.server import MindMapAPIServer

__all__ = ["MindMapAPIServer"]
