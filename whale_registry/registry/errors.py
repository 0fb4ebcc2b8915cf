class RegistryError(Exception):
    """
    Base class of the recoverable errors raised by the registry
    """


class InvalidRecipient(RegistryError):
    """
    The target owner is malformed or the zero address
    """

    def __init__(self, owner):
        super().__init__(f"Invalid recipient: {owner!r}")
        self.owner = owner


class Unauthorized(RegistryError):
    """
    The caller is not allowed to mint from this registry
    """

    def __init__(self, minter):
        super().__init__(f"Not an authorized minter: {minter!r}")
        self.minter = minter


class UnknownToken(RegistryError, KeyError):
    """
    The token id was never minted
    """

    def __init__(self, token_id: int):
        super().__init__(f"Token {token_id} does not exist")
        self.token_id = token_id

    def __str__(self):
        return self.args[0]


class IdentifierCollision(AssertionError):
    """
    The ledger was asked to record an id that already has an owner.
    This means the counter is broken and must never be caught as a RegistryError.
    """

    def __init__(self, token_id: int, owner):
        super().__init__(f"Token {token_id} is already owned by {owner}")
        self.token_id = token_id
        self.owner = owner


class CounterConflict(Exception):
    """
    The stored counter was moved by another writer while minting.
    The mint is rolled back.
    """

    def __init__(self, expected: int):
        super().__init__(f"Registry counter is no longer at {expected}")
        self.expected = expected


class WatcherError(Exception):
    pass


class WatcherAlreadyRunning(WatcherError):
    def __init__(self):
        super().__init__("Already watching for logs.")


class WatcherNotRunning(WatcherError):
    def __init__(self):
        super().__init__("No timer to clear.")
