"""
sheshape_api.security.rules

Declarative route-to-role mapping.

Rules are evaluated in order and the first match wins. Patterns are matched
segment by segment:

- literal segments match exactly
- `{name}` matches exactly one non-empty segment
- `*` matches any characters inside a single segment
- a trailing `/**` matches the prefix itself and any deeper path
- any other pattern also accepts a single trailing slash
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sheshape_api.auth.models import Principal
from sheshape_api.db.models import Role


class Access(enum.StrEnum):
    permit_all = "PERMIT_ALL"
    authenticated = "AUTHENTICATED"
    has_role = "HAS_ROLE"


class Decision(enum.StrEnum):
    allow = "ALLOW"
    unauthenticated = "UNAUTHENTICATED"
    forbidden = "FORBIDDEN"


_PARAM = re.compile(r"^\{[A-Za-z_][A-Za-z0-9_]*\}$")


def compile_pattern(pattern: str) -> re.Pattern[str]:
    if not pattern.startswith("/"):
        raise ValueError(f"pattern must start with '/': {pattern!r}")

    segments = pattern.strip("/").split("/") if pattern != "/" else []
    tail = ""
    if segments and segments[-1] == "**":
        segments = segments[:-1]
        tail = "(?:/.*)?"

    parts: list[str] = []
    for seg in segments:
        if seg == "**":
            raise ValueError(f"'**' is only supported as the last segment: {pattern!r}")
        if _PARAM.match(seg):
            parts.append("[^/]+")
        else:
            parts.append("[^/]*".join(re.escape(p) for p in seg.split("*")))

    body = "".join("/" + p for p in parts)
    if not body and not tail:
        body = "/"
    elif not tail:
        # A trailing slash reaches the same rule (the router then redirects it).
        tail = "/?"
    return re.compile(f"^{body}{tail}$")


@dataclass(frozen=True)
class RouteRule:
    patterns: tuple[str, ...]
    access: Access
    role: Role | None = None
    methods: frozenset[str] | None = None
    _compiled: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if (self.access is Access.has_role) != (self.role is not None):
            raise ValueError("a role is required exactly when access is HAS_ROLE")
        object.__setattr__(self, "_compiled", tuple(compile_pattern(p) for p in self.patterns))

    def matches(self, method: str, path: str) -> bool:
        if self.methods is not None and method.upper() not in self.methods:
            return False
        return any(rx.match(path) for rx in self._compiled)

    def decide(self, principal: Principal | None) -> Decision:
        if self.access is Access.permit_all:
            return Decision.allow
        if principal is None:
            return Decision.unauthenticated
        if self.access is Access.has_role and not principal.has_role(self.role.value):
            return Decision.forbidden
        return Decision.allow


def permit_all(*patterns: str, methods: Iterable[str] | None = None) -> RouteRule:
    return RouteRule(patterns, Access.permit_all, methods=_methods(methods))


def authenticated(*patterns: str, methods: Iterable[str] | None = None) -> RouteRule:
    return RouteRule(patterns, Access.authenticated, methods=_methods(methods))


def has_role(role: Role, *patterns: str, methods: Iterable[str] | None = None) -> RouteRule:
    return RouteRule(patterns, Access.has_role, role=role, methods=_methods(methods))


def _methods(methods: Iterable[str] | None) -> frozenset[str] | None:
    return frozenset(m.upper() for m in methods) if methods is not None else None


class SecurityPolicy:
    """Ordered rule table with an `authenticated` fallback for unmatched requests."""

    def __init__(self, rules: Sequence[RouteRule]) -> None:
        self._rules = tuple(rules)
        self._fallback = authenticated("/**")

    @property
    def rules(self) -> tuple[RouteRule, ...]:
        return self._rules

    def match(self, method: str, path: str) -> RouteRule:
        for rule in self._rules:
            if rule.matches(method, path):
                return rule
        return self._fallback

    def decide(self, method: str, path: str, principal: Principal | None) -> Decision:
        return self.match(method, path).decide(principal)


def default_rules() -> list[RouteRule]:
    return [
        # Public endpoints
        permit_all("/api/auth/register", "/api/auth/login"),
        permit_all("/api/blog/posts", "/api/blog/posts/{id}"),
        # Admin endpoints
        has_role(Role.ADMIN, "/api/admin/**"),
        # Trainer endpoints
        has_role(Role.TRAINER, "/api/gym/programs/new", "/api/gym/programs/{id}/edit"),
        # Nutritionist endpoints
        has_role(
            Role.NUTRITIONIST, "/api/nutrition/plans/new", "/api/nutrition/plans/{id}/edit"
        ),
        # API docs and probes
        permit_all("/docs", "/docs/**", "/redoc", "/openapi.json", "/healthz", "/readyz"),
    ]


def default_policy() -> SecurityPolicy:
    return SecurityPolicy(default_rules())
