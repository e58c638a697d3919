# Generated manually for the activity trail

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('action', models.CharField(choices=[('LOGIN', 'Login'), ('LOGOUT', 'Logout'), ('PASSWORD_CHANGED', 'Password Changed'), ('SUPERVISOR_REGISTERED', 'Supervisor Registered'), ('SUPERVISOR_APPROVED', 'Supervisor Approved'), ('SUPERVISOR_REJECTED', 'Supervisor Rejected'), ('OPERATOR_REGISTERED', 'Operator Registered'), ('OPERATOR_APPROVED', 'Operator Approved'), ('OPERATOR_REJECTED', 'Operator Rejected'), ('SECRETARY_REGISTERED', 'Secretary Registered'), ('MANAGER_REGISTERED', 'Manager Registered'), ('CREDENTIALS_VIEWED', 'Credentials Viewed')], db_index=True, max_length=40)),
                ('entity_type', models.CharField(blank=True, max_length=50, null=True)),
                ('entity_id', models.CharField(blank=True, max_length=64, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activity_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'activity_log',
                'ordering': ['-timestamp'],
            },
        ),
        migrations.AddIndex(
            model_name='activitylog',
            index=models.Index(fields=['user', 'action'], name='activity_user_action_idx'),
        ),
        migrations.AddIndex(
            model_name='activitylog',
            index=models.Index(fields=['entity_type', 'entity_id'], name='activity_entity_idx'),
        ),
    ]
