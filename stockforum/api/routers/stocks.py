# stockforum/api/routers/stocks.py
"""
Stock endpoints: catalogue CRUD and like/dislike.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.api.deps import get_actor, get_db
from stockforum.domain.actors import Actor
from stockforum.domain.models import StockDTO
from stockforum.domain.votes import VoteDirection
from stockforum.services import stock_service

router = APIRouter()


class StockCreateReq(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    current_price: Optional[float] = None


class StockUpdateReq(BaseModel):
    symbol: Optional[str] = Field(default=None, max_length=20)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    current_price: Optional[float] = None


def _dump(stock) -> dict:
    return StockDTO.model_validate(stock).model_dump(mode="json")


@router.get("", summary="List stocks, newest first")
async def list_stocks(search: Optional[str] = Query(default=None), db: AsyncSession = Depends(get_db)):
    stocks = await stock_service.list_stocks(db, search=search)
    return {"message": "Stocks retrieved successfully", "data": [_dump(s) for s in stocks]}


@router.get("/symbol/{symbol}", summary="Get stock by symbol")
async def get_stock_by_symbol(symbol: str, db: AsyncSession = Depends(get_db)):
    stock = await stock_service.get_stock_by_symbol(db, symbol)
    return {"message": "Stock retrieved successfully", "stock": _dump(stock)}


@router.get("/{stock_id}", summary="Get stock")
async def get_stock(stock_id: int, db: AsyncSession = Depends(get_db)):
    stock = await stock_service.get_stock(db, stock_id)
    return {"message": "Stock retrieved successfully", "stock": _dump(stock)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a stock")
async def create_stock(req: StockCreateReq, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    stock = await stock_service.create_stock(db, actor, req.model_dump())
    return {"message": "Stock created successfully", "stock": _dump(stock)}


@router.put("/{stock_id}", summary="Update a stock (owner only)")
async def update_stock(
    stock_id: int, req: StockUpdateReq, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)
):
    stock = await stock_service.update_stock(db, actor, stock_id, req.model_dump(exclude_none=True))
    return {"message": "Stock updated successfully", "stock": _dump(stock)}


@router.delete("/{stock_id}", summary="Delete a stock and its comments (owner only)")
async def delete_stock(stock_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    await stock_service.delete_stock(db, actor, stock_id)
    return {"message": "Stock deleted successfully"}


async def _vote(db: AsyncSession, actor: Actor, stock_id: int, direction: VoteDirection) -> dict:
    stock = await stock_service.vote_stock(db, actor, stock_id, direction)
    return {
        "message": f"Stock {direction.past_tense} successfully",
        "likes": stock.likes,
        "dislikes": stock.dislikes,
    }


@router.post("/{stock_id}/like", summary="Like a stock")
async def like_stock(stock_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    return await _vote(db, actor, stock_id, VoteDirection.LIKE)


@router.post("/{stock_id}/dislike", summary="Dislike a stock")
async def dislike_stock(stock_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    return await _vote(db, actor, stock_id, VoteDirection.DISLIKE)
