"""
Explicit tenant context.

Every service function receives a TenantContext instead of relying on an
ambient per-connection setting. Queries filter on ``tenant_id`` and, for
token holders, on the single event their token belongs to.
"""

from dataclasses import dataclass

from sharehub.models.access_token import AccessToken
from sharehub.models.activity_log import ActorType
from sharehub.models.admin import Admin


@dataclass(frozen=True)
class TenantContext:
    tenant_id: int
    actor_type: str
    actor_id: int | None = None
    event_id: int | None = None
    can_write: bool = False

    @classmethod
    def for_admin(cls, admin: Admin) -> "TenantContext":
        return cls(
            tenant_id=admin.tenant_id,
            actor_type=ActorType.ADMIN.value,
            actor_id=admin.id,
            can_write=True,
        )

    @classmethod
    def for_token(cls, token: AccessToken) -> "TenantContext":
        return cls(
            tenant_id=token.tenant_id,
            actor_type=token.type,
            actor_id=token.id,
            event_id=token.event_id,
            can_write=token.is_organizer,
        )

    @classmethod
    def system(cls, tenant_id: int) -> "TenantContext":
        return cls(tenant_id=tenant_id, actor_type=ActorType.SYSTEM.value, can_write=True)

    @property
    def is_admin(self) -> bool:
        return self.actor_type == ActorType.ADMIN.value

    @property
    def actor_label(self) -> str:
        return f"{self.actor_type}:{self.actor_id}" if self.actor_id is not None else self.actor_type

    def allows_event(self, event_id: int) -> bool:
        return self.event_id is None or self.event_id == event_id
