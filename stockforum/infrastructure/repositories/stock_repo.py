# stockforum/infrastructure/repositories/stock_repo.py
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.domain.models import Quote
from stockforum.infrastructure.models import Comment, Stock


async def get_stock_repo(db: AsyncSession, stock_id: int) -> Optional[Stock]:
    return await db.get(Stock, stock_id)


async def get_stock_by_symbol_repo(db: AsyncSession, symbol: str) -> Optional[Stock]:
    result = await db.execute(select(Stock).where(Stock.symbol == symbol.strip().upper()))
    return result.scalars().first()


async def list_stocks_repo(db: AsyncSession, search: Optional[str] = None, order_by_symbol: bool = False) -> List[Stock]:
    """
    All stocks, newest first (or by symbol), optionally filtered by a
    case-insensitive match on symbol or name.
    """
    stmt = select(Stock)
    if search:
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(or_(func.lower(Stock.symbol).like(pattern), func.lower(Stock.name).like(pattern)))
    if order_by_symbol:
        stmt = stmt.order_by(Stock.symbol.asc())
    else:
        stmt = stmt.order_by(Stock.created_at.desc(), Stock.id.desc())
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_existing_symbols_repo(db: AsyncSession, symbols: Sequence[str]) -> set:
    if not symbols:
        return set()
    result = await db.execute(select(Stock.symbol).where(Stock.symbol.in_(list(symbols))))
    return set(result.scalars().all())


async def create_stock_repo(db: AsyncSession, fields: Dict) -> Stock:
    stock = Stock(**fields)
    db.add(stock)
    await db.commit()
    await db.refresh(stock)
    return stock


async def save_stock_repo(db: AsyncSession, stock: Stock) -> Stock:
    db.add(stock)
    await db.commit()
    await db.refresh(stock)
    return stock


async def delete_stock_repo(db: AsyncSession, stock_id: int) -> None:
    """Delete a stock together with every comment posted on it."""
    await db.execute(delete(Comment).where(Comment.stock_id == stock_id))
    await db.execute(delete(Stock).where(Stock.id == stock_id))
    await db.commit()


async def create_stock_from_quote_repo(
    db: AsyncSession, quote: Quote, description: str, created_by: Optional[int] = None
) -> Stock:
    stock = Stock(
        symbol=quote.symbol.upper(),
        name=quote.name or f"{quote.symbol} Stock",
        description=description,
        exchange=quote.exchange,
        currency=quote.currency,
        current_price=quote.close,
        previous_close=quote.previous_close,
        percent_change=quote.percent_change,
        last_updated=datetime.now(timezone.utc),
        created_by=created_by,
    )
    db.add(stock)
    await db.commit()
    await db.refresh(stock)
    return stock


async def update_stock_prices_repo(db: AsyncSession, symbol: str, quote: Quote) -> Optional[Stock]:
    """
    Write the price fields of a quote onto an existing stock.
    A quote without a percent change keeps the stored one.
    """
    stock = await get_stock_by_symbol_repo(db, symbol)
    if stock is None:
        return None
    stock.current_price = quote.close
    if quote.previous_close is not None:
        stock.previous_close = quote.previous_close
    if quote.percent_change is not None:
        stock.percent_change = quote.percent_change
    stock.last_updated = datetime.now(timezone.utc)
    return await save_stock_repo(db, stock)
