"""Chat command parsing.

Inbound text is turned into one of the ``ParsedCommand`` variants; the
router dispatches on the variant type.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from bondswap.errors import UsageError
from bondswap.models import CommandPayload, OrderKind


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Address:
    pass


@dataclass(frozen=True)
class ChatId:
    pass


@dataclass(frozen=True)
class Buy:
    payload: CommandPayload

    kind = OrderKind.BUY


@dataclass(frozen=True)
class Sell:
    payload: CommandPayload

    kind = OrderKind.SELL


@dataclass(frozen=True)
class Invalid:
    """A command that cannot be executed; ``reason`` is shown to the user."""

    reason: str


ParsedCommand = Union[Help, Start, Address, ChatId, Buy, Sell, Invalid]


def usage(command: str) -> str:
    """Usage hint for a trade command."""
    return (
        "❌ Invalid command format. Usage:\n"
        f"/{command} <token> [amount]\n\n"
        "Example:\n"
        f"/{command} TOKEN-123 100"
    )


def parse_amount(value: str) -> Decimal:
    """Parse a whole-unit amount; must be a finite positive number."""
    # Decimal accepts "1_000"; amounts are plain numbers only
    if "_" in value:
        raise UsageError("❌ Invalid amount provided")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise UsageError("❌ Invalid amount provided")
    if not amount.is_finite() or amount <= 0:
        raise UsageError("❌ Invalid amount provided")
    return amount


def _parse_trade(command: str, text: Optional[str]) -> CommandPayload:
    params = (text or "").split()
    if not params:
        raise UsageError(usage(command), command=command)

    token = params[0]
    amount = parse_amount(params[1]) if len(params) > 1 else None
    return CommandPayload(token=token, amount=amount)


def parse_buy(text: Optional[str]) -> CommandPayload:
    """Parse ``<token> [amount]`` for /buy.

    Raises:
        UsageError: missing arguments or a non-numeric amount
    """
    return _parse_trade("buy", text)


def parse_sell(text: Optional[str]) -> CommandPayload:
    """Parse ``<token> [amount]`` for /sell.

    Raises:
        UsageError: missing arguments or a non-numeric amount
    """
    return _parse_trade("sell", text)


def split_command(text: str) -> tuple[Optional[str], str]:
    """Split ``/name@bot args`` into (``name``, ``args``).

    Returns (None, "") when the text is not a command.
    """
    text = text.strip()
    if not text.startswith("/"):
        return None, ""

    head, *rest = text.split(maxsplit=1)
    args = rest[0] if rest else ""
    name = head[1:].split("@", 1)[0].lower()
    return name or None, args.strip()


def parse_command(text: str) -> Optional[ParsedCommand]:
    """Parse a chat message into a command variant.

    Returns None when the message is not a command at all.
    """
    name, args = split_command(text)
    if name is None:
        return None

    if name == "help":
        return Help()
    if name == "start":
        return Start()
    if name == "address":
        return Address()
    if name == "chatid":
        return ChatId()

    try:
        if name == "buy":
            return Buy(parse_buy(args))
        if name == "sell":
            return Sell(parse_sell(args))
    except UsageError as e:
        return Invalid(str(e))

    return Invalid(f"Unknown command /{name}. Use /help to see available commands.")
