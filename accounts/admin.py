from django.contrib import admin

from accounts.models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'status', 'employee_id', 'created_at']
    list_filter = ['role', 'status']
    search_fields = ['email', 'username', 'first_name', 'last_name', 'employee_id', 'phone']
    # Status moves only through the identity service
    readonly_fields = ['id', 'status', 'status_reason', 'password', 'username', 'created_by', 'last_login', 'created_at', 'updated_at']
    fieldsets = (
        ('Account', {
            'fields': ('id', 'email', 'username', 'password', 'phone', 'first_name', 'last_name')
        }),
        ('Role & Status', {
            'fields': ('role', 'status', 'status_reason', 'employee_id', 'created_by', 'must_reset_password')
        }),
        ('Timestamps', {
            'fields': ('last_login', 'created_at', 'updated_at')
        }),
    )
