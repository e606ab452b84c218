"""Exception hierarchy shared by every recallkit layer."""


class RecallkitError(Exception):
    """Base class for all recallkit errors."""


class StorageError(RecallkitError):
    """A persistence read or write could not be completed."""


class CardNotFoundError(RecallkitError):
    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class SessionNotFoundError(RecallkitError):
    def __init__(self, session_id: str):
        super().__init__(f"Study session not found: {session_id}")
        self.session_id = session_id
