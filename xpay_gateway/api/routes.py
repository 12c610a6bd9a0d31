from fastapi import APIRouter, HTTPException, Request
import requests

from xpay_gateway.config.settings import load_settings
from xpay_gateway.errors import SwapConfigError, SwapUpstreamError, SymbolNotFoundError
from xpay_gateway.integrations.sideshift_rest import SideShiftRestClient
from xpay_gateway.schemas.assistant import ChatReply, ChatRequest
from xpay_gateway.schemas.portfolio import PortfolioRiskRequest, RiskBand
from xpay_gateway.schemas.price import ResolveRequest
from xpay_gateway.schemas.swap import CreateSwapRequest, SwapSimulation, SwapSimulationRequest
from xpay_gateway.services.assistant import generate_reply, welcome_message
from xpay_gateway.services.portfolio_risk import portfolio_risk
from xpay_gateway.services.swap_simulation import simulate_swap

router = APIRouter()

_COINS_REQUIRED = 'depositCoin and settleCoin are required'


def _price_feed(request: Request):
    return request.app.state.price_feed


def _swap_client(request: Request) -> SideShiftRestClient:
    client = request.app.state.swap_client
    if client is None:
        settings = load_settings(request.app.state.get_settings)
        client = SideShiftRestClient(
            api_key=settings.SIDESHIFT_API_KEY,
            base_url=settings.SIDESHIFT_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SEC,
        )
        request.app.state.swap_client = client
    if not client.api_key:
        raise HTTPException(status_code=500, detail={'error': 'SideShift API key not configured'})
    return client


def _call_upstream(op: str, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except SwapConfigError as exc:
        raise HTTPException(status_code=500, detail={'error': str(exc)}) from exc
    except SwapUpstreamError as exc:
        print(f"[SWAP][upstream_error] op={op} status={exc.status_code} message={exc.message}", flush=True)
        raise HTTPException(
            status_code=exc.status_code,
            detail={'error': exc.message, 'details': exc.details},
        ) from exc
    except requests.RequestException as exc:
        print(f"[SWAP][transport_error] op={op} error={exc!r}", flush=True)
        raise HTTPException(
            status_code=500,
            detail={'error': 'Internal server error', 'message': str(exc)},
        ) from exc


@router.get('/prices')
def list_prices(request: Request):
    feed = _price_feed(request)
    return {
        'loading': feed.loading,
        'state': feed.state,
        'prices': {symbol: snap.model_dump() for symbol, snap in feed.snapshot().items()},
    }


@router.get('/prices/{symbol}')
def get_price(symbol: str, request: Request):
    try:
        snap = _price_feed(request).require_price(symbol)
    except SymbolNotFoundError as exc:
        raise HTTPException(status_code=404, detail='symbol not found') from exc
    return snap.model_dump()


@router.post('/prices/resolve')
async def resolve_price(req: ResolveRequest, request: Request):
    feed = _price_feed(request)
    resolved = await feed.resolve_and_add(req.symbol)
    if resolved is None:
        raise HTTPException(status_code=404, detail='symbol not found')
    return {'symbol': resolved, 'snapshot': feed.require_price(resolved).model_dump()}


@router.get('/metrics/prices')
def price_metrics(request: Request):
    return _price_feed(request).metrics()


@router.post('/swaps/simulate', response_model=SwapSimulation)
def simulate(req: SwapSimulationRequest, request: Request):
    try:
        return simulate_swap(_price_feed(request), req)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get('/swaps/quote')
def get_swap_quote(
    request: Request,
    depositCoin: str | None = None,
    settleCoin: str | None = None,
    depositAmount: str | None = None,
    settleAmount: str | None = None,
    type: str = 'fixed',
):
    client = _swap_client(request)
    if not depositCoin or not settleCoin:
        raise HTTPException(status_code=400, detail={'error': _COINS_REQUIRED})
    return _call_upstream(
        'quote',
        client.get_quote,
        depositCoin,
        settleCoin,
        deposit_amount=depositAmount,
        settle_amount=settleAmount,
        quote_type=type,
    )


@router.get('/swaps/pairs')
def get_swap_pairs(request: Request, depositCoin: str | None = None, settleCoin: str | None = None):
    client = _swap_client(request)
    return _call_upstream('pairs', client.get_pairs, depositCoin, settleCoin)


@router.post('/swaps')
def create_swap(req: CreateSwapRequest, request: Request):
    client = _swap_client(request)
    if not req.depositCoin or not req.settleCoin:
        raise HTTPException(status_code=400, detail={'error': _COINS_REQUIRED})
    return _call_upstream(
        'create',
        client.create_order,
        deposit_coin=req.depositCoin,
        settle_coin=req.settleCoin,
        deposit_amount=req.depositAmount,
        settle_amount=req.settleAmount,
        affiliate_id=req.affiliateId,
    )


@router.get('/swaps/{order_id}')
def get_swap_status(order_id: str, request: Request):
    client = _swap_client(request)
    return _call_upstream('status', client.get_order, order_id)


@router.post('/portfolio/risk', response_model=RiskBand)
def get_portfolio_risk(req: PortfolioRiskRequest):
    return portfolio_risk(req.holdings)


@router.get('/assistant/welcome', response_model=ChatReply)
def assistant_welcome(request: Request):
    return ChatReply(content=welcome_message(load_settings(request.app.state.get_settings).AI_NAME))


@router.post('/assistant/reply', response_model=ChatReply)
def assistant_reply(req: ChatRequest, request: Request):
    return ChatReply(content=generate_reply(_price_feed(request), req.message))
