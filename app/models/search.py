from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(BaseModel):
    query: str = ""


class SearchMatchOut(CamelModel):
    line: Optional[int] = None
    page: Optional[int] = None
    snippet: str
    context: str
    exact_match: bool
    match_type: Literal["exact", "partial", "fuzzy"]


class SearchResultOut(CamelModel):
    filename: str
    file_type: str
    matches: list[SearchMatchOut]
    file_url: str
    file_id: str
    total_matches: int
    exact_matches: int
