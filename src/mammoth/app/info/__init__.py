from .service import InfoPayload, InfoService

__all__ = ["InfoPayload", "InfoService"]
