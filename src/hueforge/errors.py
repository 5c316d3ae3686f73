"""Exception hierarchy for hueforge.

Every error raised by the package derives from :class:`HueforgeError` so the
CLI can report user-fixable problems uniformly, while :class:`InternalBug`
marks defects in hueforge itself and is reported differently.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "HueforgeError",
    "ConfigError",
    "InvalidName",
    "SwatchError",
    "InvalidColor",
    "CollidingAsciiNames",
    "CollidingNameCases",
    "RoleError",
    "UndefinedRole",
    "UndefinedSwatch",
    "CircularReference",
    "MissingRequiredRoles",
    "SchemeError",
    "TemplateError",
    "RenderingError",
    "WriteError",
    "LedgerError",
    "UpstreamError",
    "FormattingError",
    "InternalBug",
]


def _quoted(names: Sequence[str]) -> str:
    return ", ".join(f"`{n}`" for n in names)


class HueforgeError(Exception):
    """Base class for all hueforge errors."""


class ConfigError(HueforgeError):
    """The project configuration file could not be read or is invalid."""


class InvalidName(HueforgeError):
    """A scheme or swatch name (or its ASCII fallback) failed validation."""

    def __init__(self, context: str, name: str, reason: str, *, ascii_name: str | None = None) -> None:
        self.context = context
        self.name = name
        self.reason = reason
        self.ascii_name = ascii_name
        if ascii_name is None:
            msg = f"invalid {context} name `{name}`: {reason}"
        else:
            msg = f"invalid generated ascii fallback `{ascii_name}` for {context} `{name}`: {reason}"
        super().__init__(msg)


# ----- palette -----------------------------------------------------------


class SwatchError(HueforgeError):
    """Base class for palette problems."""


class InvalidColor(SwatchError):
    def __init__(self, swatch: str, value: str) -> None:
        self.swatch = swatch
        self.value = value
        super().__init__(f"swatch `{swatch}` has invalid hex color `{value}`")


class CollidingAsciiNames(SwatchError):
    def __init__(self, ascii_name: str, names: Sequence[str]) -> None:
        self.ascii_name = ascii_name
        self.names = list(names)
        super().__init__(f"{_quoted(self.names)} fall back to the same ascii name `{ascii_name}`")


class CollidingNameCases(SwatchError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"swatches {_quoted(self.names)} differ only in case")


# ----- roles -------------------------------------------------------------


class RoleError(HueforgeError):
    """Base class for role resolution failures; fatal for the owning scheme."""


class UndefinedRole(RoleError):
    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"undefined role `{role}`")


class UndefinedSwatch(RoleError):
    def __init__(self, role: str, swatch: str) -> None:
        self.role = role
        self.swatch = swatch
        super().__init__(f"role `{role}` references non-existent swatch `{swatch}`")


class CircularReference(RoleError):
    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("circular role references: " + " -> ".join(f"`{r}`" for r in self.chain))


class MissingRequiredRoles(RoleError):
    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"missing required roles: {', '.join(self.missing)}")


# ----- loading / rendering -------------------------------------------------


class SchemeError(HueforgeError):
    """A scheme file could not be read or has an invalid structure."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid scheme `{path}`: {reason}")


class TemplateError(HueforgeError):
    """A template could not be read, parsed for directives, or compiled."""


class RenderingError(HueforgeError):
    def __init__(self, template: str, scheme: str, reason: str) -> None:
        self.template = template
        self.scheme = scheme
        super().__init__(f"failed to render template `{template}` with scheme `{scheme}`: {reason}")


class WriteError(HueforgeError):
    def __init__(self, action: str, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"failed to {action} `{path}`: {reason}")


class LedgerError(HueforgeError):
    """The persisted manifest could not be read, parsed or written."""


class UpstreamError(HueforgeError):
    """A git remote URL could not be interpreted."""


class FormattingError(HueforgeError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"failed to format `{path}`: {reason}")


class InternalBug(HueforgeError):
    def __init__(self, module: str, reason: str) -> None:
        self.module = module
        self.reason = reason
        super().__init__(f"internal error in {module}: {reason}! this is a bug!")
