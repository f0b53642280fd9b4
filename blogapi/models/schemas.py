# blogapi/models/schemas.py
from typing import Optional, List, Union
from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    # Trimming, defaults and required checks live in the mutation service;
    # "" is treated like an omitted field.
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Union[str, List[str]]] = None
    status: Optional[str] = None


class PostUpdate(PostCreate):
    pass


class CategoryCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdate(CategoryCreate):
    pass


class Post(BaseModel):
    """A stored post, serialized with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    content: str
    excerpt: str = ''
    author: str
    category: str
    tags: List[str] = Field(default_factory=list)
    status: str
    view_count: int = Field(0, alias='viewCount', ge=0)
    created_at: str = Field(..., alias='createdAt')
    updated_at: str = Field(..., alias='updatedAt')


class Category(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ''
    created_at: str = Field(..., alias='createdAt')
    updated_at: str = Field(..., alias='updatedAt')
