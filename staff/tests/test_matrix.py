from django.test import SimpleTestCase

from accounts.models import CustomUser
from core.exceptions import Forbidden, ValidationError
from staff import matrix
from staff.models import ProfileType

Role = CustomUser.Role


class RegistrationMatrixTest(SimpleTestCase):
    def test_every_registrable_type_has_a_rule(self):
        for profile_type in (
            ProfileType.GENERAL_SUPERVISOR,
            ProfileType.SUPERVISOR,
            ProfileType.OPERATOR,
            ProfileType.SECRETARY,
            ProfileType.MANAGER,
        ):
            self.assertIn(profile_type, matrix.REGISTRATION_RULES)

    def test_allowed_pairs(self):
        allowed = [
            (Role.MANAGER, ProfileType.GENERAL_SUPERVISOR),
            (Role.GENERAL_SUPERVISOR, ProfileType.SUPERVISOR),
            (Role.SUPERVISOR, ProfileType.OPERATOR),
            (Role.GENERAL_SUPERVISOR, ProfileType.OPERATOR),
            (Role.MANAGER, ProfileType.SECRETARY),
            (Role.DIRECTOR, ProfileType.SECRETARY),
            (Role.DIRECTOR, ProfileType.MANAGER),
        ]
        for role, profile_type in allowed:
            with self.subTest(role=role, profile_type=profile_type):
                rule = matrix.check_registration(role, profile_type)
                self.assertEqual(rule.profile_type, profile_type)

    def test_every_other_pair_is_denied(self):
        allowed = {
            (rule.profile_type, role)
            for rule in matrix.REGISTRATION_RULES.values()
            for role in rule.registrant_roles
        }
        for profile_type in matrix.REGISTRATION_RULES:
            for role in Role.values:
                if (profile_type, role) in allowed:
                    continue
                with self.subTest(role=role, profile_type=profile_type):
                    with self.assertRaises(Forbidden):
                        matrix.check_registration(role, profile_type)

    def test_manager_registering_supervisor_names_both_rules(self):
        with self.assertRaises(Forbidden) as ctx:
            matrix.check_registration(Role.MANAGER, ProfileType.SUPERVISOR)
        self.assertEqual(
            str(ctx.exception.detail),
            'Managers can only register General Supervisors and Secretaries. '
            'Supervisors must be registered by General Supervisors.',
        )

    def test_developer_cannot_register(self):
        self.assertEqual(matrix.registrable_types(Role.DEVELOPER), [])
        with self.assertRaises(Forbidden):
            matrix.check_registration(Role.DEVELOPER, ProfileType.SECRETARY)

    def test_directors_are_not_registered_through_workflow(self):
        with self.assertRaises(Forbidden):
            matrix.check_registration(Role.DIRECTOR, ProfileType.DIRECTOR)

    def test_gated_types(self):
        gated = {t for t, rule in matrix.REGISTRATION_RULES.items() if rule.gated}
        self.assertEqual(gated, {ProfileType.GENERAL_SUPERVISOR, ProfileType.SUPERVISOR, ProfileType.OPERATOR})


class ApprovalMatrixTest(SimpleTestCase):
    def test_manager_cannot_approve_general_supervisor(self):
        with self.assertRaises(Forbidden) as ctx:
            matrix.check_approval(Role.MANAGER, ProfileType.GENERAL_SUPERVISOR, matrix.APPROVE)
        self.assertEqual(
            str(ctx.exception.detail),
            'Managers cannot approve General Supervisors. Only Directors can approve General Supervisors.',
        )

    def test_rejection_uses_the_same_rules(self):
        with self.assertRaises(Forbidden) as ctx:
            matrix.check_approval(Role.MANAGER, ProfileType.GENERAL_SUPERVISOR, matrix.REJECT)
        self.assertIn('cannot reject', str(ctx.exception.detail))

    def test_allowed_approvers(self):
        allowed = [
            (Role.DIRECTOR, ProfileType.GENERAL_SUPERVISOR),
            (Role.DEVELOPER, ProfileType.GENERAL_SUPERVISOR),
            (Role.MANAGER, ProfileType.SUPERVISOR),
            (Role.DIRECTOR, ProfileType.SUPERVISOR),
            (Role.MANAGER, ProfileType.OPERATOR),
            (Role.DEVELOPER, ProfileType.OPERATOR),
        ]
        for role, profile_type in allowed:
            with self.subTest(role=role, profile_type=profile_type):
                matrix.check_approval(role, profile_type, matrix.APPROVE)

    def test_general_supervisor_needs_chain_for_operators(self):
        with self.assertRaises(Forbidden):
            matrix.check_approval(Role.GENERAL_SUPERVISOR, ProfileType.OPERATOR, matrix.APPROVE)
        rule = matrix.check_approval(Role.GENERAL_SUPERVISOR, ProfileType.OPERATOR, matrix.APPROVE, on_chain=True)
        self.assertEqual(rule.profile_type, ProfileType.OPERATOR)

    def test_chain_flag_does_not_widen_other_roles(self):
        with self.assertRaises(Forbidden):
            matrix.check_approval(Role.SUPERVISOR, ProfileType.OPERATOR, matrix.APPROVE, on_chain=True)

    def test_ungated_types_have_no_approval_rule(self):
        with self.assertRaises(Forbidden):
            matrix.check_approval(Role.DIRECTOR, ProfileType.SECRETARY, matrix.APPROVE)

    def test_approvable_types(self):
        self.assertEqual(
            set(matrix.approvable_types(Role.DIRECTOR)),
            {ProfileType.GENERAL_SUPERVISOR, ProfileType.SUPERVISOR},
        )
        self.assertEqual(
            set(matrix.approvable_types(Role.MANAGER)),
            {ProfileType.SUPERVISOR, ProfileType.OPERATOR},
        )
        self.assertEqual(matrix.approvable_types(Role.GENERAL_SUPERVISOR), [ProfileType.OPERATOR])
        self.assertEqual(matrix.approvable_types(Role.OPERATOR), [])


class NormalizationTest(SimpleTestCase):
    def test_profile_type_accepts_url_spellings(self):
        self.assertEqual(matrix.normalize_profile_type('general-supervisor'), ProfileType.GENERAL_SUPERVISOR)
        self.assertEqual(matrix.normalize_profile_type(' operator '), ProfileType.OPERATOR)

    def test_unknown_profile_type(self):
        with self.assertRaises(ValidationError):
            matrix.normalize_profile_type('janitor')

    def test_decision(self):
        self.assertEqual(matrix.normalize_decision('approve'), matrix.APPROVE)
        with self.assertRaises(ValidationError):
            matrix.normalize_decision('maybe')
