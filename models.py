from typing import List, Optional
from pydantic import BaseModel, Field


class ChuckJoke(BaseModel):
    id: Optional[str] = None
    value: str
    url: Optional[str] = None
    icon_url: Optional[str] = None
    categories: List[str] = Field(default_factory=list)


class DadJoke(BaseModel):
    id: Optional[str] = None
    joke: str
    status: Optional[int] = None


# Tool arguments


class NoArguments(BaseModel):
    pass


class CategoryArguments(BaseModel):
    category: str = Field(..., description="Category of the Chuck Norris joke")
