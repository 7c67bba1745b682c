"""HTTP surface for the submission ledger."""

from movilidad.api.app import create_app

__all__ = ["create_app"]
