"""Service layer for stencil.

Example usage:

    from stencil.core.config import Config
    from stencil.services import Data

    config = Config.from_env()
    config.parse_datasource_flags(["config=./config.yaml"])

    async with Data.from_config(config) as data:
        value = await data.datasource("config")
"""

from .data import Data

__all__ = [
    "Data",
]
