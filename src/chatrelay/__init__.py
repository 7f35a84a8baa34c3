"""chatrelay — chat front-end proxy with source-based context assembly."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("chatrelay")
except importlib.metadata.PackageNotFoundError:
    __version__ = "dev"
