from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая схема с camelCase именами полей в JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
