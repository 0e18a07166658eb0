from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class StockDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    symbol: str
    name: str
    description: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None
    current_price: Optional[float] = None
    previous_close: Optional[float] = None
    percent_change: Optional[float] = None
    last_updated: Optional[datetime] = None
    likes: int = 0
    dislikes: int = 0
    liked_by: List[str] = Field(default_factory=list)
    disliked_by: List[str] = Field(default_factory=list)
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    stock_id: int
    parent_comment_id: Optional[int] = None
    content: str
    is_reply: bool = False
    is_anonymous: bool = False
    author_id: Optional[int] = None
    author_username: Optional[str] = None
    likes: int = 0
    dislikes: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    replies: List["CommentDTO"] = Field(default_factory=list)


class Quote(BaseModel):
    """One parsed quote from the price provider."""
    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None
    close: Optional[float] = None
    previous_close: Optional[float] = None
    percent_change: Optional[float] = None


class SymbolOutcome(BaseModel):
    symbol: str
    status: str  # imported | updated | skipped | error
    message: str = ""


class ImportSummary(BaseModel):
    imported_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    batches: int = 0
    results: List[SymbolOutcome] = Field(default_factory=list)

    def record(self, outcome: SymbolOutcome) -> None:
        self.results.append(outcome)
        if outcome.status == "imported":
            self.imported_count += 1
        elif outcome.status == "updated":
            self.updated_count += 1
        elif outcome.status == "skipped":
            self.skipped_count += 1
        else:
            self.error_count += 1
