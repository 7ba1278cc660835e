from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import CHANNEL_PREFIXES


def _normalize_channels(channels: list[str] | Any) -> list[str]:
    """Prefix bare names with ``#`` and drop blanks and duplicates, keeping order."""
    if isinstance(channels, str):
        channels = channels.split(",")
    if not isinstance(channels, list | tuple):
        raise ValueError("channels must be a list")
    normalized: list[str] = []
    for ch in channels:
        if not isinstance(ch, str):
            continue
        ch = ch.strip()
        if not ch:
            continue
        if ch[0] not in CHANNEL_PREFIXES:
            ch = f"#{ch}"
        normalized.append(ch)
    return list(dict.fromkeys(normalized))


class BotConfig(BaseModel):
    """Connection and module settings for one bot.

    Attributes:
        host: Server host name.
        port: Server port.
        password: Optional server password sent as ``PASS``.
        nick: Nick requested at registration.
        user: User name for ``USER`` (defaults to the nick).
        realname: Real name for ``USER`` (defaults to the nick).
        channels: Channels joined once the welcome burst ends.
        prefix: Command prefix, e.g. ``!``.
        superusers: Nicks allowed to run admin commands and expressions.
        module_dir: Directory holding ``<name>.py`` plugin files.
        modules: Module names loaded at startup, in order.
        config_path: File this configuration was read from, if any.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    host: str = Field(min_length=1)
    port: int = Field(default=6667, ge=1, le=65535)
    password: str | None = Field(
        default=None, validation_alias=AliasChoices("password", "pass")
    )
    nick: str = Field(min_length=1)
    user: str | None = None
    realname: str | None = Field(
        default=None, validation_alias=AliasChoices("realname", "rname")
    )
    channels: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("channels", "chans")
    )
    prefix: str = Field(default="!", min_length=1)
    superusers: frozenset[str] = frozenset()
    module_dir: str = Field(
        default="modules", validation_alias=AliasChoices("module_dir", "moduleFolder")
    )
    modules: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("modules", "mods")
    )
    config_path: str | None = None

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        return _normalize_channels(v)

    @field_validator("nick", "user")
    @classmethod
    def validate_no_spaces(cls, v: str | None) -> str | None:
        if v is not None and any(c.isspace() for c in v):
            raise ValueError("must not contain whitespace")
        return v

    @field_validator("superusers", mode="before")
    @classmethod
    def validate_superusers(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [s for s in (p.strip() for p in v.split(",")) if s]
        return v

    @model_validator(mode="after")
    def fill_identity_defaults(self) -> BotConfig:
        if not self.user:
            self.user = self.nick
        if not self.realname:
            self.realname = self.nick
        return self
