import structlog

logger = structlog.get_logger(__name__)


class Keeper:
    """Off-chain automation: polls ``check_upkeep`` and performs upkeep when due."""

    def __init__(self, raffle, address=None):
        self.raffle = raffle
        self.env = raffle.env
        self.address = address or self.env.generate_address()

    def tick(self):
        upkeep_needed, perform_data = self.raffle.check_upkeep(b"")
        if not upkeep_needed:
            return False
        with self.env.prank(self.address):
            self.raffle.perform_upkeep(perform_data)
        logger.info("keeper.upkeep_performed", raffle=self.raffle.address, keeper=self.address)
        return True

    def run(self, rounds, step):
        """Advance time by ``step`` seconds before each of ``rounds`` ticks; return how many performed upkeep."""
        performed = 0
        for _ in range(rounds):
            self.env.time_travel(step)
            if self.tick():
                performed += 1
        return performed
