"""Error kinds raised while handling chat commands and orders."""


class BondswapError(Exception):
    """Base class for all bot errors."""


class UnauthorizedAccess(BondswapError):
    """Raised when a chat outside the allow-list issues a command."""

    def __init__(self, chat_id: int):
        self.chat_id = chat_id
        super().__init__(f"Chat {chat_id} is not authorized")


class UsageError(BondswapError):
    """Raised when a command is malformed."""

    def __init__(self, message: str, command: str = ""):
        self.command = command
        super().__init__(message)


class OrderError(BondswapError):
    """Base class for failures that abort a buy or sell order."""


class ContractNotFoundError(OrderError):
    """No bonding contract is registered for the requested token."""

    def __init__(self, token_id: str):
        self.token_id = token_id
        super().__init__(f"No contract found for token {token_id}")


class InvalidAmountError(OrderError):
    """The computed trade size is not a positive integer."""

    def __init__(self, message: str = "Invalid amount calculated"):
        super().__init__(message)


class BalanceNotFoundError(OrderError):
    """A token required for the order is absent from the wallet."""

    def __init__(self, token_id: str):
        self.token_id = token_id
        super().__init__(f"Token {token_id} not found in wallet")


class RemoteCallFailure(OrderError):
    """A query, balance lookup or transaction submission failed."""


class WalletUnavailable(OrderError):
    """The bot wallet cannot be loaded from its keystore."""
