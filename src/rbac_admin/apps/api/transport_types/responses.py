from typing import Any, Dict, List, Union

from pydantic import BaseModel


class MetaResponse(BaseModel):
    code: int
    success: bool
    message: str


class EnvelopeResponse(BaseModel):
    meta: MetaResponse
    result: Union[Dict[str, Any], List[Any]]
    errors: Union[Dict[str, List[str]], List[str]]
