"""Path templates with named captures.

Templates use the pathname subset of URLPattern syntax:

    /users/:id            one segment, captured as "id"
    /items/:id(\\d+)      one segment matching a custom regex
    /posts/:slug?         optional segment (the preceding "/" is optional too)
    /files/:path+         one or more segments
    /files/:path*         zero or more segments
    /static/*             anything, captured as "0" ("1", "2", ... for later ones)

Patterns are matched against the whole percent-encoded pathname of a URL.
Query string and fragment never take part in matching.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote

import httpx

from rtx.errors import InvalidPattern

_SEGMENT = "[^/]+?"
_TOKEN = re.compile(
    r":(?P<name>[A-Za-z_]\w*)(?:\((?P<regex>(?:\\.|[^()\\])+)\))?(?P<modifier>[?*+])?"
    r"|(?P<wildcard>\*)"
    r"|(?P<brace>[{}])"
)


@dataclass(frozen=True, slots=True)
class Pattern:
    """A compiled path template."""

    template: str
    regex: re.Pattern[str]
    keys: tuple[tuple[str, str], ...]  # (regex group, param key)

    def exec(self, url: httpx.URL | str) -> dict[str, str | None] | None:
        """Match url, returning every capture (None for absent optional ones) or None."""
        match = self.regex.fullmatch(_pathname(url))
        if match is None:
            return None
        return {key: match.group(group) for group, key in self.keys}

    def test(self, url: httpx.URL | str) -> bool:
        return self.regex.fullmatch(_pathname(url)) is not None

    def __str__(self) -> str:
        return self.template


def _pathname(url: httpx.URL | str) -> str:
    if not isinstance(url, httpx.URL):
        url = httpx.URL(url)
    return url.raw_path.decode("ascii").partition("?")[0]


# same safe set httpx uses when encoding a path
_PATH_SAFE = "/:@!$&'()*+,;=%"


def _literal(text: str) -> str:
    return re.escape(quote(text, safe=_PATH_SAFE))


@lru_cache(maxsize=1024)
def compile_pattern(template: str) -> Pattern:
    """Compile a path template, raising InvalidPattern if it is malformed."""
    if not template.startswith(("/", "*")):
        msg = f"path template must start with '/' or '*', provided {template=}"
        raise InvalidPattern(msg)

    parts: list[str] = []
    keys: list[tuple[str, str]] = []
    wildcards = 0
    last = 0
    for token in _TOKEN.finditer(template):
        literal = template[last : token.start()]
        last = token.end()

        if token["brace"]:
            msg = f"groups are not supported in path templates, provided {template=}"
            raise InvalidPattern(msg)

        if token["wildcard"]:
            group = f"_w{wildcards}"
            keys.append((group, str(wildcards)))
            wildcards += 1
            parts.append(_literal(literal))
            parts.append(f"(?P<{group}>.*)")
            continue

        name = token["name"]
        modifier = token["modifier"]
        keys.append((name, name))

        # optional captures swallow the "/" in front of them
        prefix = ""
        if modifier in ("?", "*") and literal.endswith("/"):
            literal, prefix = literal[:-1], "/"
        parts.append(_literal(literal))

        seg = f"(?:{token['regex'] or _SEGMENT})"
        repeated = f"{seg}(?:/{seg})*" if modifier in ("*", "+") else seg
        capture = f"(?P<{name}>{repeated})"
        if modifier in ("?", "*"):
            capture = f"(?:{prefix}{capture})?"
        parts.append(capture)

    parts.append(_literal(template[last:]))

    try:
        regex = re.compile("".join(parts))
    except re.error as e:
        msg = f"invalid path template {template!r}: {e}"
        raise InvalidPattern(msg) from e

    return Pattern(template=template, regex=regex, keys=tuple(keys))
