# stockforum/api/routers/stock_data.py
"""
Market data: the imported stock list, the bulk S&P 500 import and the
single-symbol price refresh.
"""
import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.api.deps import (
    get_actor, get_db, get_import_policy, get_quote_client_factory, get_session_factory
)
from stockforum.domain.actors import Actor
from stockforum.domain.models import StockDTO
from stockforum.domain.symbols import SP500_SYMBOLS
from stockforum.infrastructure.repositories.stock_repo import list_stocks_repo
from stockforum.services import price_service, stock_service
from stockforum.services.price_service import ImportPolicy
from stockforum.services.stock_service import require_registered

logger = logging.getLogger(__name__)

router = APIRouter()

# Background imports in flight; keeps the tasks referenced until done.
_background_imports = set()


class ImportReq(BaseModel):
    symbols: Optional[List[str]] = None


def _dump(stock) -> dict:
    return StockDTO.model_validate(stock).model_dump(mode="json")


@router.get("", summary="All stocks with market data, by symbol")
async def list_stock_data(search: Optional[str] = Query(default=None), db: AsyncSession = Depends(get_db)):
    stocks = await list_stocks_repo(db, search=search, order_by_symbol=True)
    return {"message": "Stock data retrieved successfully", "data": [_dump(s) for s in stocks]}


@router.get("/{symbol}", summary="Market data for one symbol")
async def get_stock_data(symbol: str, db: AsyncSession = Depends(get_db)):
    stock = await stock_service.get_stock_by_symbol(db, symbol)
    return {"message": "Stock data retrieved successfully", "data": _dump(stock)}


async def _run_import(session_factory, client, symbols, created_by, policy):
    async with client:
        return await price_service.import_symbols(
            session_factory, client.fetch_quote, symbols, created_by=created_by, policy=policy
        )


def _log_import_result(task: asyncio.Task) -> None:
    _background_imports.discard(task)
    if task.cancelled():
        logger.warning("Background import cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background import failed", exc_info=exc)
        return
    summary = task.result()
    logger.info(
        "Background import finished: %d imported, %d skipped, %d errors",
        summary.imported_count, summary.skipped_count, summary.error_count,
    )


@router.post("/import-sp500", summary="Import S&P 500 stocks from the quote provider")
async def import_sp500(
    req: Optional[ImportReq] = None,
    background: bool = Query(default=False),
    actor: Actor = Depends(get_actor),
    session_factory=Depends(get_session_factory),
    client_factory=Depends(get_quote_client_factory),
    policy: ImportPolicy = Depends(get_import_policy),
):
    """
    Fetch and store every symbol not imported yet. A full run takes many
    minutes because of the provider's rate limit; with background=true the
    request returns 202 immediately and the import continues in the
    server process.
    """
    require_registered(actor, "import stocks")
    symbols = (req.symbols if req and req.symbols else None) or SP500_SYMBOLS

    # Raises MissingConfigurationError before any work is accepted.
    client = client_factory()

    if background:
        task = asyncio.create_task(_run_import(session_factory, client, symbols, actor.user_id, policy))
        _background_imports.add(task)
        task.add_done_callback(_log_import_result)
        logger.info("Started background import of %d symbols", len(symbols))
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={"message": f"Import of {len(symbols)} symbols started"},
        )

    summary = await _run_import(session_factory, client, symbols, actor.user_id, policy)
    return {"message": "Import completed", "data": summary.model_dump()}


@router.put("/{symbol}/update", summary="Refresh one symbol's price now")
async def update_stock_data(
    symbol: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
    client_factory=Depends(get_quote_client_factory),
):
    require_registered(actor, "update stock data")
    async with client_factory() as client:
        stock = await price_service.update_symbol(db, client.fetch_quote, symbol)
    return {"message": "Stock data updated successfully", "data": _dump(stock)}
