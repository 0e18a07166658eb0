# stockforum/services/stock_service.py
"""
Stock catalogue: CRUD, symbol lookup and stock votes.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.domain.actors import Actor, Registered
from stockforum.domain.errors import (
    AuthenticationError, DuplicateError, ForbiddenError, NotFoundError, ValidationError
)
from stockforum.domain.votes import VoteDirection, VoteLedger, apply_vote
from stockforum.infrastructure.models import Stock
from stockforum.infrastructure.repositories.stock_repo import (
    create_stock_repo,
    delete_stock_repo,
    get_stock_by_symbol_repo,
    get_stock_repo,
    list_stocks_repo,
    save_stock_repo,
)
from stockforum.infrastructure.repositories.user_repo import get_user_repo

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("symbol", "name", "description", "current_price")


def require_registered(actor: Actor, action: str) -> Registered:
    if not isinstance(actor, Registered):
        raise AuthenticationError(f"Authentication required to {action}")
    return actor


async def list_stocks(db: AsyncSession, search: Optional[str] = None) -> List[Stock]:
    return await list_stocks_repo(db, search=search)


async def get_stock(db: AsyncSession, stock_id: int) -> Stock:
    stock = await get_stock_repo(db, stock_id)
    if not stock:
        raise NotFoundError("Stock not found")
    return stock


async def get_stock_by_symbol(db: AsyncSession, symbol: str) -> Stock:
    if not symbol or not symbol.strip():
        raise ValidationError("Stock symbol is required")
    stock = await get_stock_by_symbol_repo(db, symbol)
    if not stock:
        raise NotFoundError("Stock not found")
    return stock


async def create_stock(db: AsyncSession, actor: Actor, data: Dict) -> Stock:
    """
    Create a stock owned by the acting user.
    Raises DuplicateError if the symbol is taken.
    """
    owner = require_registered(actor, "create a stock")
    if not await get_user_repo(db, owner.user_id):
        raise AuthenticationError("User not found")

    symbol = (data.get("symbol") or "").strip().upper()
    name = (data.get("name") or "").strip()
    if not symbol:
        raise ValidationError("Stock symbol is required")
    if not name:
        raise ValidationError("Stock name is required")

    if await get_stock_by_symbol_repo(db, symbol):
        raise DuplicateError("Stock with this symbol already exists")

    fields = {
        "symbol": symbol,
        "name": name,
        "description": (data.get("description") or "").strip() or None,
        "current_price": data.get("current_price"),
        "created_by": owner.user_id,
    }
    try:
        stock = await create_stock_repo(db, fields)
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateError("Stock with this symbol already exists") from e
    logger.info("Stock %s created by user %s", stock.symbol, owner.user_id)
    return stock


async def update_stock(db: AsyncSession, actor: Actor, stock_id: int, data: Dict) -> Stock:
    """Only fields present (and non-empty) in data are changed."""
    user = require_registered(actor, "update a stock")
    stock = await get_stock(db, stock_id)
    if stock.created_by != user.user_id:
        raise ForbiddenError("Not authorized to update this stock")

    for field in EDITABLE_FIELDS:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if field == "symbol":
            value = value.strip().upper()
            if value != stock.symbol and await get_stock_by_symbol_repo(db, value):
                raise DuplicateError("Stock with this symbol already exists")
        elif isinstance(value, str):
            value = value.strip()
        setattr(stock, field, value)

    return await save_stock_repo(db, stock)


async def delete_stock(db: AsyncSession, actor: Actor, stock_id: int) -> None:
    user = require_registered(actor, "delete a stock")
    stock = await get_stock(db, stock_id)
    if stock.created_by != user.user_id:
        raise ForbiddenError("Not authorized to delete this stock")
    await delete_stock_repo(db, stock.id)
    logger.info("Stock %s deleted by user %s", stock.symbol, user.user_id)


async def vote_stock(db: AsyncSession, actor: Actor, stock_id: int, direction: VoteDirection) -> Stock:
    stock = await get_stock(db, stock_id)
    ledger = apply_vote(VoteLedger.from_record(stock), actor, direction, subject="stock")
    ledger.write_to(stock)
    return await save_stock_repo(db, stock)
