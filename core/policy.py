# core/policy.py

"""
Centralized access-control policy.

Every protected route resolves to exactly one rule keyed by
(resource kind, action). Evaluation order is fixed:

    1. authentication   (non-public rules need a principal)
    2. role             (principal.role in allowed_roles)
    3. ownership        (only when the rule allows an owner override)
    4. invariants       (always evaluated, admins included)
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Tuple

from models.auth import Principal
from models.enums import BaseStrEnum, Role


# ============================================================
# VOCABULARY
# ============================================================
class ResourceKind(BaseStrEnum):
    order = "order"
    message = "message"
    notification = "notification"
    inventory = "inventory"
    product = "product"
    user = "user"
    profile = "profile"
    file = "file"


class Action(str, Enum):
    # Plain str enum: BaseStrEnum.list() would clash with the "list" member

    def __str__(self):
        return str(self.value)

    list = "list"
    list_own = "list_own"
    list_all = "list_all"
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"
    respond = "respond"
    delete_files = "delete_files"
    upload = "upload"
    download = "download"


class DenyReason(BaseStrEnum):
    unauthenticated = "unauthenticated"
    insufficient_role = "insufficient_role"
    not_owner = "not_owner"
    admin_immutable = "admin_immutable"
    self_action = "self_action"


@dataclass(frozen=True)
class ResourceRef:
    kind: ResourceKind
    id: Optional[str] = None
    owner_id: Optional[str] = None
    role: Optional[Role] = None   # target account role (user resources)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None
    detail: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason, detail: str) -> "Decision":
        return cls(False, reason, detail)


# An invariant returns a Decision to deny, or None to pass
Invariant = Callable[[Principal, ResourceRef], Optional[Decision]]


@dataclass(frozen=True)
class PolicyRule:
    kind: ResourceKind
    action: Action
    allowed_roles: frozenset = frozenset()
    public: bool = False
    ownership_override: bool = False
    invariants: Tuple[Invariant, ...] = field(default_factory=tuple)

    @property
    def key(self) -> Tuple[ResourceKind, Action]:
        return (self.kind, self.action)


class UnknownPolicyRule(KeyError):
    """A handler asked about a (kind, action) pair nobody declared."""


# ============================================================
# INVARIANTS
# ============================================================
def target_not_admin(principal: Principal, resource: ResourceRef) -> Optional[Decision]:
    if resource.role == Role.ADMIN:
        return Decision.deny(DenyReason.admin_immutable, "Cannot delete admin users")
    return None


def target_not_self(principal: Principal, resource: ResourceRef) -> Optional[Decision]:
    if resource.id is not None and resource.id == principal.id:
        return Decision.deny(DenyReason.self_action, "Cannot delete your own account")
    return None


def edit_target_not_admin(principal: Principal, resource: ResourceRef) -> Optional[Decision]:
    if resource.role == Role.ADMIN:
        return Decision.deny(DenyReason.admin_immutable, "Cannot modify admin users")
    return None


# Admins edit their own account through /users/me
def edit_target_not_self(principal: Principal, resource: ResourceRef) -> Optional[Decision]:
    if resource.id is not None and resource.id == principal.id:
        return Decision.deny(DenyReason.self_action, "Cannot modify your own account")
    return None


# ============================================================
# RULE TABLE
# ============================================================
ANY_ROLE = frozenset(Role)
STAFF_OR_ADMIN = frozenset({Role.STAFF, Role.ADMIN})
ADMIN_ONLY = frozenset({Role.ADMIN})


def _rule(kind, action, roles=frozenset(), **kwargs) -> PolicyRule:
    return PolicyRule(kind=kind, action=action, allowed_roles=frozenset(roles), **kwargs)


POLICY_RULES: Tuple[PolicyRule, ...] = (
    # Products: storefront catalogue
    _rule(ResourceKind.product, Action.list, public=True),
    _rule(ResourceKind.product, Action.create, ADMIN_ONLY),
    _rule(ResourceKind.product, Action.update, ADMIN_ONLY),
    _rule(ResourceKind.product, Action.delete, ADMIN_ONLY),

    # Orders
    _rule(ResourceKind.order, Action.list_own, ANY_ROLE),
    _rule(ResourceKind.order, Action.create, ANY_ROLE),
    _rule(ResourceKind.order, Action.list_all, STAFF_OR_ADMIN),
    _rule(ResourceKind.order, Action.read, STAFF_OR_ADMIN, ownership_override=True),
    _rule(ResourceKind.order, Action.update, STAFF_OR_ADMIN),
    _rule(ResourceKind.order, Action.delete_files, STAFF_OR_ADMIN),

    # Messages
    _rule(ResourceKind.message, Action.list_own, ANY_ROLE),
    _rule(ResourceKind.message, Action.create, ANY_ROLE),
    _rule(ResourceKind.message, Action.list_all, STAFF_OR_ADMIN),
    _rule(ResourceKind.message, Action.read, STAFF_OR_ADMIN, ownership_override=True),
    _rule(ResourceKind.message, Action.update, STAFF_OR_ADMIN),
    _rule(ResourceKind.message, Action.delete, STAFF_OR_ADMIN),
    _rule(ResourceKind.message, Action.respond, STAFF_OR_ADMIN),

    # Notifications
    _rule(ResourceKind.notification, Action.list, STAFF_OR_ADMIN),
    _rule(ResourceKind.notification, Action.list_all, ADMIN_ONLY),
    _rule(ResourceKind.notification, Action.create, STAFF_OR_ADMIN),
    _rule(ResourceKind.notification, Action.update, STAFF_OR_ADMIN),
    _rule(ResourceKind.notification, Action.delete, STAFF_OR_ADMIN),

    # Inventory
    _rule(ResourceKind.inventory, Action.list, STAFF_OR_ADMIN),
    _rule(ResourceKind.inventory, Action.create, STAFF_OR_ADMIN),
    _rule(ResourceKind.inventory, Action.update, STAFF_OR_ADMIN),
    _rule(ResourceKind.inventory, Action.delete, ADMIN_ONLY),

    # User administration (staff management shares these rules)
    _rule(ResourceKind.user, Action.list, ADMIN_ONLY),
    _rule(ResourceKind.user, Action.create, ADMIN_ONLY),
    _rule(
        ResourceKind.user, Action.update, ADMIN_ONLY,
        invariants=(edit_target_not_self, edit_target_not_admin),
    ),
    _rule(
        ResourceKind.user, Action.delete, ADMIN_ONLY,
        invariants=(target_not_self, target_not_admin),
    ),

    # Own profile
    _rule(ResourceKind.profile, Action.read, ANY_ROLE),
    _rule(ResourceKind.profile, Action.update, ANY_ROLE),

    # Files
    _rule(ResourceKind.file, Action.upload, ANY_ROLE),
    _rule(ResourceKind.file, Action.download, STAFF_OR_ADMIN, ownership_override=True),
)


# ============================================================
# GATE
# ============================================================
class PolicyGate:
    """Stateless evaluator over an immutable rule table."""

    def __init__(self, rules: Iterable[PolicyRule]):
        table = {}
        for rule in rules:
            if rule.key in table:
                raise ValueError(f"Duplicate policy rule for {rule.kind}:{rule.action}")
            table[rule.key] = rule
        self._rules: Mapping[Tuple[ResourceKind, Action], PolicyRule] = MappingProxyType(table)

    @property
    def rules(self) -> Mapping[Tuple[ResourceKind, Action], PolicyRule]:
        return self._rules

    def rule_for(self, kind: ResourceKind, action: Action) -> PolicyRule:
        try:
            return self._rules[(kind, action)]
        except KeyError:
            raise UnknownPolicyRule(f"No policy rule for {kind}:{action}") from None

    # ---------------------------------------------------------
    # Steps 1-3
    # ---------------------------------------------------------
    def _check_identity_and_role(
        self,
        rule: PolicyRule,
        principal: Optional[Principal],
        resource: Optional[ResourceRef],
    ) -> Optional[Decision]:
        if rule.public:
            return None

        if principal is None:
            return Decision.deny(DenyReason.unauthenticated, "Unauthorized")

        if principal.role in rule.allowed_roles:
            return None

        if rule.ownership_override:
            if resource is not None and resource.owner_id is not None and resource.owner_id == principal.id:
                return None
            return Decision.deny(DenyReason.not_owner, "Forbidden - not the owner of this resource")

        roles = ", ".join(sorted(r.value for r in rule.allowed_roles))
        return Decision.deny(DenyReason.insufficient_role, f"Forbidden - requires one of: {roles}")

    def precheck(self, principal: Optional[Principal], kind: ResourceKind, action: Action) -> Decision:
        """
        Evaluation without a target resource.

        Owner-override rules only require authentication here; the
        handler must call authorize() again once the row is loaded.
        """
        rule = self.rule_for(kind, action)

        if rule.ownership_override and not rule.public:
            if principal is None:
                return Decision.deny(DenyReason.unauthenticated, "Unauthorized")
            return Decision.allow()

        denied = self._check_identity_and_role(rule, principal, None)
        return denied or Decision.allow()

    def authorize(
        self,
        principal: Optional[Principal],
        kind: ResourceKind,
        action: Action,
        resource: Optional[ResourceRef] = None,
    ) -> Decision:
        rule = self.rule_for(kind, action)

        if rule.invariants and resource is None:
            raise ValueError(f"Policy rule {kind}:{action} needs the target resource")

        denied = self._check_identity_and_role(rule, principal, resource)
        if denied:
            return denied

        for invariant in rule.invariants:
            denied = invariant(principal, resource)
            if denied:
                return denied

        return Decision.allow()

    def needs_resource(self, kind: ResourceKind, action: Action) -> bool:
        rule = self.rule_for(kind, action)
        return rule.ownership_override or bool(rule.invariants)


# Process-wide, built once at import
policy_gate = PolicyGate(POLICY_RULES)
