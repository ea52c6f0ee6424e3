"""
Enveloppe commune des réponses API
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Réponse standard {success, data, message, count}"""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    count: Optional[int] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class CamelModel(BaseModel):
    """Objet exposé par l'API (clés en camelCase)"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
