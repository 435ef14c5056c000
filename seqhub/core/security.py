from dataclasses import dataclass


@dataclass(frozen=True, repr=False)
class Credential:
    """Username/token pair parsed from a single `username@token` string.

    An empty username means the token owner (GitHub `viewer`).
    """

    username: str
    token: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, token='***')"


def parse_credential(text: str) -> Credential:
    """Split credential text on its first `@` into username and token.

    Without an `@` the whole text is the token and the username is empty.
    The split is purely positional, so a leading `@` also gives an empty
    username. No other validation happens here; a bad token is reported by
    the API call.
    """

    at_pos = text.find("@")
    if at_pos == -1:
        return Credential(username="", token=text)
    return Credential(username=text[:at_pos], token=text[at_pos + 1 :])


def mask_credential(text: str) -> str:
    """Return credential text with every token character replaced by `*`."""

    visible = text[: text.find("@") + 1]
    return visible + "*" * (len(text) - len(visible))
