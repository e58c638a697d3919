# Generated manually for the staff role profiles

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


def profile_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('employee_id', models.CharField(max_length=40, unique=True)),
        ('full_name', models.CharField(max_length=255)),
        ('approval_status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], db_index=True, default='PENDING', max_length=20)),
        ('raw_password', models.TextField(blank=True, editable=False, null=True)),
        ('approved_at', models.DateTimeField(blank=True, null=True)),
        ('rejection_reason', models.TextField(blank=True, default='')),
        ('salary', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
        ('region_assigned', models.CharField(blank=True, default='', max_length=100)),
        ('start_date', models.DateField(blank=True, null=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
    ]


def raw_password_constraint(name):
    return models.CheckConstraint(
        condition=(
            models.Q(('approval_status', 'PENDING'), ('raw_password__isnull', False))
            | models.Q(models.Q(('approval_status', 'PENDING'), _negated=True), ('raw_password__isnull', True))
        ),
        name=f'staff_{name}_raw_password_only_pending',
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SupervisorProfile',
            fields=profile_fields() + [
                ('supervisor_type', models.CharField(choices=[('GENERAL_SUPERVISOR', 'General Supervisor'), ('SUPERVISOR', 'Supervisor')], max_length=20)),
                ('general_supervisor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='supervisors', to='staff.supervisorprofile')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='supervisorprofile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'supervisor_profiles',
                'ordering': ['-created_at'],
                'abstract': False,
                'indexes': [models.Index(fields=['supervisor_type', 'approval_status'], name='supervisor_type_status_idx')],
                'constraints': [
                    raw_password_constraint('supervisorprofile'),
                    models.CheckConstraint(
                        condition=(
                            models.Q(('supervisor_type', 'GENERAL_SUPERVISOR'), ('general_supervisor__isnull', True))
                            | models.Q(('supervisor_type', 'SUPERVISOR'), ('general_supervisor__isnull', False))
                        ),
                        name='staff_supervisorprofile_hierarchy_shape',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='OperatorProfile',
            fields=profile_fields() + [
                ('shift_type', models.CharField(blank=True, choices=[('DAY', 'Day'), ('NIGHT', 'Night'), ('ROTATING', 'Rotating')], default='', max_length=20)),
                ('supervisor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='operators', to='staff.supervisorprofile')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='operatorprofile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'operator_profiles',
                'ordering': ['-created_at'],
                'abstract': False,
                'constraints': [raw_password_constraint('operatorprofile')],
            },
        ),
        migrations.CreateModel(
            name='SecretaryProfile',
            fields=profile_fields() + [
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='secretaryprofile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'secretary_profiles',
                'ordering': ['-created_at'],
                'abstract': False,
                'constraints': [raw_password_constraint('secretaryprofile')],
            },
        ),
        migrations.CreateModel(
            name='ManagerProfile',
            fields=profile_fields() + [
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='managerprofile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'manager_profiles',
                'ordering': ['-created_at'],
                'abstract': False,
                'constraints': [raw_password_constraint('managerprofile')],
            },
        ),
        migrations.CreateModel(
            name='DirectorProfile',
            fields=profile_fields() + [
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='directorprofile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'director_profiles',
                'ordering': ['-created_at'],
                'abstract': False,
                'constraints': [raw_password_constraint('directorprofile')],
            },
        ),
    ]
