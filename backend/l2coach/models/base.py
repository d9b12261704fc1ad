"""
Base model for everything that crosses the HTTP boundary.

Fields are snake_case in Python and camelCase on the wire. Either spelling is
accepted on input; responses and `model_dump(by_alias=True)` use camelCase.
Persisted documents use the field names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CoachModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
