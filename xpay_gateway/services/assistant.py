from __future__ import annotations

from xpay_gateway.services.price_feed import PriceFeed

PRICE_TOKENS = ('eth', 'btc', 'matic', 'sol', 'bnb', 'usdc')

_SWAP_REPLY = (
    "I can help you execute that swap! Here's what I recommend:\n\n"
    "• Check current gas fees (they're moderate right now)\n"
    "• Consider market volatility\n"
    "• Review slippage tolerance\n\n"
    "Would you like me to prepare a swap transaction for you?"
)

_PORTFOLIO_REPLY = (
    "Let me analyze your portfolio for you. Based on current market conditions:\n\n"
    "✅ Your diversification looks reasonable\n"
    "⚠️ Consider rebalancing if volatility increases\n"
    "💡 Gas fees are optimal for swaps right now\n\n"
    "Would you like specific recommendations?"
)

_AUTOMATION_REPLY = (
    "Great question! I can help you set up automation rules. For example:\n\n"
    "\"If BTC price > $70,000 → swap 20% to USDC\"\n"
    "\"If gas fees < 10 gwei → rebalance portfolio\"\n\n"
    "Would you like to create a rule now?"
)

_RISK_REPLY = (
    "Based on your current portfolio composition:\n\n"
    "📊 Your risk level is moderate\n"
    "🛡️ Consider holding 30-40% in stablecoins for protection\n"
    "📈 Volatile assets can offer higher returns but need monitoring\n\n"
    "Would you like me to suggest a safer allocation?"
)


def welcome_message(ai_name: str | None = None) -> str:
    name = ai_name or 'X PAY Assistant'
    return (
        f"Hi! I'm {name}, your AI crypto assistant. I can help you:\n\n"
        "• Analyze market trends\n"
        "• Suggest optimal swap timings\n"
        "• Answer questions about your portfolio\n"
        "• Set up automation rules\n\n"
        "What would you like to know?"
    )


def _price_reply(feed: PriceFeed, lower: str) -> str | None:
    token = next((t for t in PRICE_TOKENS if t in lower), None)
    if token is None:
        return None
    snap = feed.get_price(token)
    if snap is None:
        return None
    direction = 'up' if snap.change_24h >= 0 else 'down'
    return (
        f"{token.upper()} is currently trading at ${snap.price:.2f}. "
        f"It's {direction} {abs(snap.change_24h):.2f}% in the last 24 hours.\n\n"
        "Would you like me to analyze if this is a good time to buy or sell?"
    )


def generate_reply(feed: PriceFeed, message: str) -> str:
    """Fixed keyword lookup; first matching branch wins."""
    lower = message.lower()

    if 'price' in lower or 'how much' in lower:
        reply = _price_reply(feed, lower)
        # no tracked price falls through to the other branches
        if reply is not None:
            return reply

    if 'buy' in lower or 'swap' in lower:
        return _SWAP_REPLY

    if 'portfolio' in lower or 'holdings' in lower:
        return _PORTFOLIO_REPLY

    if 'automation' in lower or 'auto' in lower or 'rule' in lower:
        return _AUTOMATION_REPLY

    if 'risk' in lower or 'safe' in lower:
        return _RISK_REPLY

    return (
        f"I understand you're asking about \"{message}\". Here's my take:\n\n"
        "The crypto market is dynamic right now. I recommend:\n\n"
        "• Monitor price movements closely\n"
        "• Set up automation rules for protection\n"
        "• Diversify across multiple assets\n\n"
        "Would you like more specific advice on this topic?"
    )
