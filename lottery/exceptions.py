class ContractError(Exception):
    """A reverted call. Every effect of the call is rolled back."""


class InsufficientFunds(ContractError):
    def __init__(self, account, balance, amount):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(f"{account} has {balance} wei, needs {amount}")


class TransferRejected(ContractError):
    def __init__(self, recipient):
        self.recipient = recipient
        super().__init__(f"{recipient} does not accept payments")


class NotPayable(ContractError):
    def __init__(self, function_name):
        super().__init__(f"{function_name} is not payable")


class ContractNotFound(ContractError):
    def __init__(self, address):
        self.address = address
        super().__init__(f"No contract at {address}")


# Raffle reverts

class RaffleError(ContractError):
    pass


class InsufficientPayment(RaffleError):
    def __init__(self, sent, required):
        self.sent = sent
        self.required = required
        super().__init__(f"Raffle__InsufficientPayment: sent {sent}, required {required}")


class NotOpen(RaffleError):
    def __init__(self):
        super().__init__("Raffle__NotOpen")


class UpkeepNotNeeded(RaffleError):
    def __init__(self, balance, num_players, state):
        self.balance = balance
        self.num_players = num_players
        self.state = state
        super().__init__(
            f"Raffle__UpkeepNotNeeded(balance={balance}, players={num_players}, state={int(state)})"
        )


class UnknownRequest(RaffleError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Raffle__UnknownRequest({request_id})")


class PayoutFailed(RaffleError):
    def __init__(self, winner, amount):
        self.winner = winner
        self.amount = amount
        super().__init__(f"Raffle__TransferFailed: {amount} wei to {winner}")


class Unauthorized(RaffleError):
    def __init__(self, caller, expected):
        self.caller = caller
        self.expected = expected
        super().__init__(f"OnlyCoordinatorCanFulfill(have={caller}, want={expected})")


class NoRandomWords(RaffleError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Raffle__NoRandomWords({request_id})")


class PlayerIndexOutOfRange(RaffleError):
    def __init__(self, index, num_players):
        super().__init__(f"Player index {index} out of range ({num_players} players)")


# VRF coordinator mock reverts

class CoordinatorError(ContractError):
    pass


class InvalidSubscription(CoordinatorError):
    def __init__(self, sub_id):
        super().__init__(f"InvalidSubscription({sub_id})")


class InvalidConsumer(CoordinatorError):
    def __init__(self, sub_id, consumer):
        super().__init__(f"InvalidConsumer(subId={sub_id}, consumer={consumer})")


class MustBeSubOwner(CoordinatorError):
    def __init__(self, owner):
        super().__init__(f"MustBeSubOwner({owner})")


class TooManyConsumers(CoordinatorError):
    def __init__(self):
        super().__init__("TooManyConsumers")


class InsufficientBalance(CoordinatorError):
    def __init__(self):
        super().__init__("InsufficientBalance")


class InvalidRandomWords(CoordinatorError):
    def __init__(self):
        super().__init__("InvalidRandomWords")


class NonexistentRequest(CoordinatorError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__("nonexistent request")


class ConfigError(Exception):
    """Raised for a missing or malformed network configuration."""
