"""Digital stamp card package: collect stamps via ``?point=<id>`` links and unlock a reward."""

from .routes import create_stampcard_blueprint

__all__ = ["create_stampcard_blueprint"]
