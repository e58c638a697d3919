from django.contrib import admin

from .models import DirectorProfile, ManagerProfile, OperatorProfile, SecretaryProfile, SupervisorProfile

# Approval status only moves through the approval workflow
WORKFLOW_FIELDS = ['approval_status', 'approved_by', 'approved_at', 'rejection_reason']


class RoleProfileAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'employee_id', 'approval_status', 'approved_at', 'created_at']
    list_filter = ['approval_status']
    search_fields = ['full_name', 'employee_id', 'user__email']
    readonly_fields = ['id', 'user', 'employee_id', 'created_at', 'updated_at'] + WORKFLOW_FIELDS
    exclude = ['raw_password']

    def has_add_permission(self, request):
        return False


@admin.register(SupervisorProfile)
class SupervisorProfileAdmin(RoleProfileAdmin):
    list_display = RoleProfileAdmin.list_display + ['supervisor_type', 'general_supervisor']
    list_filter = ['supervisor_type', 'approval_status']
    readonly_fields = RoleProfileAdmin.readonly_fields + ['supervisor_type', 'general_supervisor']


@admin.register(OperatorProfile)
class OperatorProfileAdmin(RoleProfileAdmin):
    list_display = RoleProfileAdmin.list_display + ['supervisor', 'shift_type']
    readonly_fields = RoleProfileAdmin.readonly_fields + ['supervisor']


admin.site.register(SecretaryProfile, RoleProfileAdmin)
admin.site.register(ManagerProfile, RoleProfileAdmin)
admin.site.register(DirectorProfile, RoleProfileAdmin)
