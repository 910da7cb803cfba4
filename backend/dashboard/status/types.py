"""Response models for the public game-server status API."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_GAME_PORT = 25565


class ProbePlayers(BaseModel):
    online: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)


class ProbeMotd(BaseModel):
    clean: list[str] = Field(default_factory=list)


class ProbeResult(BaseModel):
    """Normalized outcome of one status probe.

    Only ``online`` and ``players`` feed reconciliation; ``version`` and
    ``motd`` are advisory. Unknown upstream fields are ignored.
    """

    online: bool
    ip: str | None = None
    port: int | None = None
    players: ProbePlayers | None = None
    version: str | None = None
    motd: ProbeMotd | None = None

    @property
    def players_online(self) -> int:
        if not self.online or self.players is None:
            return 0
        return self.players.online

    @classmethod
    def unreachable(cls, address: str) -> ProbeResult:
        """Result reported when the status API itself could not be queried."""
        return cls(online=False, ip=address, port=DEFAULT_GAME_PORT)
