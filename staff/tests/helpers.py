import itertools

from accounts.models import CustomUser
from staff.models import ApprovalStatus, ProfileType, SupervisorProfile

PASSWORD = 'Sentinel#2024'

_sequence = itertools.count(1)


def make_user(role, email=None, status=CustomUser.Status.ACTIVE, password=PASSWORD, **extra):
    number = next(_sequence)
    extra.setdefault('first_name', role.title().replace('_', ' '))
    extra.setdefault('last_name', f'User{number}')
    return CustomUser.objects.create_user(
        email=email or f'{role.lower()}{number}@sentinel.test',
        password=password,
        role=role,
        status=status,
        employee_id=f'TST-{number:05d}',
        **extra,
    )


def make_supervisor_profile(user, supervisor_type=ProfileType.GENERAL_SUPERVISOR, general_supervisor=None,
                            approval_status=ApprovalStatus.APPROVED):
    return SupervisorProfile.objects.create(
        user=user,
        employee_id=user.employee_id,
        full_name=user.display_name,
        supervisor_type=supervisor_type,
        general_supervisor=general_supervisor,
        approval_status=approval_status,
        raw_password=SupervisorProfile.seal_password(PASSWORD) if approval_status == ApprovalStatus.PENDING else None,
    )


def staff_hierarchy():
    """An active Director, Manager and Developer plus an approved GS with one approved Supervisor"""
    director = make_user(CustomUser.Role.DIRECTOR)
    manager = make_user(CustomUser.Role.MANAGER, created_by=director)
    developer = make_user(CustomUser.Role.DEVELOPER)
    gs_user = make_user(CustomUser.Role.GENERAL_SUPERVISOR, created_by=manager)
    gs_profile = make_supervisor_profile(gs_user)
    supervisor_user = make_user(CustomUser.Role.SUPERVISOR, created_by=gs_user)
    supervisor_profile = make_supervisor_profile(
        supervisor_user, ProfileType.SUPERVISOR, general_supervisor=gs_profile
    )
    return {
        'director': director,
        'manager': manager,
        'developer': developer,
        'gs': gs_user,
        'gs_profile': gs_profile,
        'supervisor': supervisor_user,
        'supervisor_profile': supervisor_profile,
    }
