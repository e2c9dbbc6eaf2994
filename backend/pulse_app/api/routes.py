"""REST API routes."""

import logging
from xml.sax.saxutils import escape

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from pulse_app.services import Services
from pulse_core.models import InsufficientData, NoPriceData, UnknownTicker

logger = logging.getLogger(__name__)

router = APIRouter()


# Response models
class PriceResponse(BaseModel):
    """Latest price response model."""

    ticker: str
    available: bool
    price: float | None = None


class AnalysisResponse(BaseModel):
    """Analysis response model."""

    ticker: str
    status: str  # "ok" | "insufficient_data"
    progress: str | None = None
    trend: str | None = None
    direction: str | None = None
    confidence: float | None = None
    entry: float | None = None
    stop_loss: float | None = None
    take_profit: list[float] = []
    risk: float | None = None  # entry to stop distance


class HealthResponse(BaseModel):
    """Service health response model."""

    stream_state: str
    instruments: int
    tracked_symbols: int
    ticks_received: int


def _services(request: Request) -> Services:
    return request.app.state.services


def _twiml(message: str) -> Response:
    body = f"<Response><Message>{escape(message)}</Message></Response>"
    return Response(content=body, media_type="text/xml")


@router.post("/webhook")
async def webhook(request: Request) -> Response:
    """Inbound messaging webhook: one text command in, one TwiML reply out."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Bad Request: Malformed JSON body")
    else:
        payload = dict(await request.form())

    if not payload:
        raise HTTPException(status_code=400, detail="Bad Request: No body provided")

    text = payload.get("Body") if isinstance(payload, dict) else None
    reply = _services(request).commands.handle(text if isinstance(text, str) else "")
    return _twiml(reply)


@router.get("/price/{ticker}", response_model=PriceResponse)
async def get_price(ticker: str, request: Request) -> PriceResponse:
    """Get the latest price for a ticker."""
    result = _services(request).query.current_price(ticker)
    if isinstance(result, UnknownTicker):
        raise HTTPException(status_code=404, detail=f"Unknown ticker: {result.ticker}")
    if isinstance(result, NoPriceData):
        return PriceResponse(ticker=result.ticker, available=False)
    return PriceResponse(ticker=result.ticker, available=True, price=result.price)


@router.get("/analysis/{ticker}", response_model=AnalysisResponse)
async def get_analysis(ticker: str, request: Request) -> AnalysisResponse:
    """Get trend, signal and levels for a ticker."""
    result = _services(request).query.analyze(ticker)
    if isinstance(result, UnknownTicker):
        raise HTTPException(status_code=404, detail=f"Unknown ticker: {result.ticker}")
    if isinstance(result, InsufficientData):
        return AnalysisResponse(
            ticker=result.ticker,
            status="insufficient_data",
            progress=result.progress,
        )
    return AnalysisResponse(
        ticker=result.ticker,
        status="ok",
        trend=result.trend.value,
        direction=result.direction.value,
        confidence=round(result.confidence, 2),
        entry=result.entry,
        stop_loss=result.stop_loss,
        take_profit=list(result.take_profit),
        risk=result.risk_amount if result.stop_loss is not None else None,
    )


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Report the feed connection state."""
    services = _services(request)
    return HealthResponse(
        stream_state=services.collector.state.value,
        instruments=len(services.catalog),
        tracked_symbols=len(services.store.symbols()),
        ticks_received=services.collector.ticks_received,
    )
