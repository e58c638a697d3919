"""
Authorization matrix for staff registration and approval.

Both tables are consulted once at the top of the corresponding operation.
Denials carry the rule that was violated so operators can tell the
similarly-shaped rules apart.
"""
from dataclasses import dataclass

from accounts.models import CustomUser
from core.exceptions import Forbidden, ValidationError

from .models import ProfileType

Role = CustomUser.Role

APPROVE = 'APPROVE'
REJECT = 'REJECT'
DECISIONS = (APPROVE, REJECT)

PLURALS = {
    Role.DIRECTOR: 'Directors',
    Role.MANAGER: 'Managers',
    Role.GENERAL_SUPERVISOR: 'General Supervisors',
    Role.SUPERVISOR: 'Supervisors',
    Role.OPERATOR: 'Operators',
    Role.SECRETARY: 'Secretaries',
    Role.ADMIN: 'Admins',
    Role.DEVELOPER: 'Developers',
}


@dataclass(frozen=True)
class RegistrationRule:
    profile_type: str
    identity_role: str
    registrant_roles: frozenset
    employee_id_prefix: str
    gated: bool
    # Registrant must own an APPROVED supervisor profile of one of these types
    registrant_profile_types: frozenset = frozenset()
    denial: str = ''


@dataclass(frozen=True)
class ApprovalRule:
    profile_type: str
    approver_roles: frozenset
    # Roles allowed only for profiles inside their own supervisor chain
    chain_roles: frozenset = frozenset()
    denial: str = ''


REGISTRATION_RULES = {
    ProfileType.GENERAL_SUPERVISOR: RegistrationRule(
        profile_type=ProfileType.GENERAL_SUPERVISOR,
        identity_role=Role.GENERAL_SUPERVISOR,
        registrant_roles=frozenset({Role.MANAGER}),
        employee_id_prefix='GS',
        gated=True,
        denial='General Supervisors must be registered by Managers.',
    ),
    ProfileType.SUPERVISOR: RegistrationRule(
        profile_type=ProfileType.SUPERVISOR,
        identity_role=Role.SUPERVISOR,
        registrant_roles=frozenset({Role.GENERAL_SUPERVISOR}),
        employee_id_prefix='SPV',
        gated=True,
        registrant_profile_types=frozenset({ProfileType.GENERAL_SUPERVISOR}),
        denial='Supervisors must be registered by General Supervisors.',
    ),
    ProfileType.OPERATOR: RegistrationRule(
        profile_type=ProfileType.OPERATOR,
        identity_role=Role.OPERATOR,
        registrant_roles=frozenset({Role.SUPERVISOR, Role.GENERAL_SUPERVISOR}),
        employee_id_prefix='OPR',
        gated=True,
        registrant_profile_types=frozenset({ProfileType.SUPERVISOR, ProfileType.GENERAL_SUPERVISOR}),
        denial='Operators must be registered by Supervisors or General Supervisors.',
    ),
    ProfileType.SECRETARY: RegistrationRule(
        profile_type=ProfileType.SECRETARY,
        identity_role=Role.SECRETARY,
        registrant_roles=frozenset({Role.MANAGER, Role.DIRECTOR}),
        employee_id_prefix='SEC',
        gated=False,
        denial='Secretaries must be registered by Managers or Directors.',
    ),
    ProfileType.MANAGER: RegistrationRule(
        profile_type=ProfileType.MANAGER,
        identity_role=Role.MANAGER,
        registrant_roles=frozenset({Role.DIRECTOR}),
        employee_id_prefix='MGR',
        gated=False,
        denial='Managers must be registered by Directors.',
    ),
}

APPROVAL_RULES = {
    ProfileType.GENERAL_SUPERVISOR: ApprovalRule(
        profile_type=ProfileType.GENERAL_SUPERVISOR,
        approver_roles=frozenset({Role.DIRECTOR, Role.DEVELOPER}),
        denial='Only Directors can {verb} General Supervisors.',
    ),
    ProfileType.SUPERVISOR: ApprovalRule(
        profile_type=ProfileType.SUPERVISOR,
        approver_roles=frozenset({Role.MANAGER, Role.DIRECTOR, Role.DEVELOPER}),
        denial='Only Managers or Directors can {verb} Supervisors.',
    ),
    ProfileType.OPERATOR: ApprovalRule(
        profile_type=ProfileType.OPERATOR,
        approver_roles=frozenset({Role.MANAGER, Role.DEVELOPER}),
        chain_roles=frozenset({Role.GENERAL_SUPERVISOR}),
        denial='Only Managers or the General Supervisor over the registering Supervisor can {verb} Operators.',
    ),
}

# Employee ID prefix for profiles created outside the registration flow
DIRECTOR_EMPLOYEE_ID_PREFIX = 'DIR'


def plural(role):
    return PLURALS.get(role, f'{role.title()}s')


def registrable_types(role):
    return [rule.profile_type for rule in REGISTRATION_RULES.values() if role in rule.registrant_roles]


def normalize_profile_type(value):
    normalized = str(value or '').strip().upper().replace('-', '_')
    if normalized not in ProfileType.values:
        raise ValidationError(f'Unknown profile type: {value}')
    return normalized


def normalize_decision(value):
    normalized = str(value or '').strip().upper()
    if normalized not in DECISIONS:
        raise ValidationError(f'Unknown decision: {value}')
    return normalized


def check_registration(registrant_role, profile_type):
    """Return the registration rule for ``profile_type`` or raise Forbidden"""
    rule = REGISTRATION_RULES.get(profile_type)
    if rule is None:
        raise Forbidden(f'{plural(profile_type)} cannot be registered through this workflow.')
    if registrant_role in rule.registrant_roles:
        return rule

    allowed = registrable_types(registrant_role)
    if allowed:
        labels = ' and '.join(plural(t) for t in allowed)
        scope = f'{plural(registrant_role)} can only register {labels}.'
    else:
        scope = f'{plural(registrant_role)} cannot register staff.'
    raise Forbidden(f'{scope} {rule.denial}')


def check_approval(approver_role, profile_type, decision, on_chain=False):
    """Raise Forbidden unless ``approver_role`` may resolve ``profile_type``"""
    rule = APPROVAL_RULES.get(profile_type)
    verb = 'approve' if decision == APPROVE else 'reject'
    if rule is None:
        raise Forbidden(f'{plural(profile_type)} do not require approval.')
    if approver_role in rule.approver_roles:
        return rule
    if approver_role in rule.chain_roles and on_chain:
        return rule
    if approver_role in rule.chain_roles:
        raise Forbidden(
            f'{plural(approver_role)} can only {verb} {plural(profile_type)} within their own supervisor chain.'
        )
    denial = rule.denial.format(verb=verb)
    raise Forbidden(f'{plural(approver_role)} cannot {verb} {plural(profile_type)}. {denial}')


def approvable_types(role):
    """Profile types ``role`` may resolve, at least within its own chain"""
    return [
        rule.profile_type for rule in APPROVAL_RULES.values()
        if role in rule.approver_roles or role in rule.chain_roles
    ]
