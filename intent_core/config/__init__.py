from .settings import Config, DEFAULT_REGION

__all__ = ["Config", "DEFAULT_REGION"]
