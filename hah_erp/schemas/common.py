"""
Schemas compartidos: metadatos de paginación y respuestas simples.
"""

from pydantic import BaseModel


class PageMeta(BaseModel):
    """Campos comunes de toda respuesta paginada (las subclases agregan `items`)."""
    total: int
    page: int
    size: int
    pages: int
    has_next: bool = False
    has_prev: bool = False


class MessageResponse(BaseModel):
    message: str
