"""Parse the property dump printed by ``launchctl list <label>``."""

from typing import Any

_PUNCTUATION = "{}()=;,"


def _tokenize(text: str) -> list[tuple[str, str]]:
    """Split into (kind, value) tokens: kind is 'p' (punctuation), 's' (quoted) or 'w' (bare word)."""
    tokens: list[tuple[str, str]] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
        elif ch in _PUNCTUATION:
            tokens.append(("p", ch))
            i += 1
        elif ch == '"':
            i += 1
            chars: list[str] = []
            while i < n and text[i] != '"':
                if text[i] == "\\" and i + 1 < n:
                    i += 1
                    chars.append({"n": "\n", "t": "\t"}.get(text[i], text[i]))
                else:
                    chars.append(text[i])
                i += 1
            if i >= n:
                raise ValueError("Unterminated string in launchctl output")
            tokens.append(("s", "".join(chars)))
            i += 1
        else:
            start = i
            while i < n and not text[i].isspace() and text[i] not in _PUNCTUATION and text[i] != '"':
                i += 1
            tokens.append(("w", text[start:i]))
    return tokens


def _word(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        return value


class _Parser:
    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> tuple[str, str]:
        token = self.peek()
        if token is None:
            raise ValueError("Unexpected end of launchctl output")
        self.pos += 1
        return token

    def skip(self, punct: str) -> None:
        if self.peek() == ("p", punct):
            self.pos += 1

    def value(self) -> Any:
        kind, text = self.take()
        if kind == "s":
            return text
        if kind == "w":
            return _word(text)
        if text == "{":
            return self.dictionary()
        if text == "(":
            return self.array()
        raise ValueError(f"Unexpected {text!r} in launchctl output")

    def dictionary(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while self.peek() != ("p", "}"):
            kind, key = self.take()
            if kind == "p":
                raise ValueError(f"Expected key, got {key!r} in launchctl output")
            if self.take() != ("p", "="):
                raise ValueError(f"Expected '=' after {key!r} in launchctl output")
            result[key] = self.value()
            self.skip(";")
        self.take()
        return result

    def array(self) -> list[Any]:
        result: list[Any] = []
        while self.peek() != ("p", ")"):
            result.append(self.value())
            self.skip(";")
            self.skip(",")
        self.take()
        return result


def _parse_launchctl_list(text: str) -> dict[str, Any]:
    """Convert ``launchctl list <label>`` output to a dict.

    Raises:
        ValueError: If the text is not a property dump
    """
    parser = _Parser(_tokenize(text))
    result = parser.value()
    if not isinstance(result, dict):
        raise ValueError("launchctl output is not a dictionary")
    return result
