"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Admin configuration for CustomUser and Role models.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.db.models import Count, Q
from django.utils.translation import gettext_lazy as _

from .models import CustomUser, Role


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    """Admin configuration for Role model."""

    list_display = ('code', 'name', 'is_system_role', 'program_wide_users', 'client_scoped_users')
    list_filter = ('is_system_role',)
    search_fields = ('name', 'code', 'description')
    readonly_fields = ('group', 'created_at', 'updated_at')
    ordering = ('code',)

    fieldsets = (
        (None, {'fields': ('code', 'name', 'description')}),
        (_('Permissions Group'), {'fields': ('is_system_role', 'group')}),
        (_('Timestamps'), {'fields': ('created_at', 'updated_at')}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            program_wide=Count('users', filter=Q(users__client_type__isnull=True)),
            client_scoped=Count('users', filter=Q(users__client_type__isnull=False)),
        )

    @admin.display(description=_('Programme-wide'), ordering='program_wide')
    def program_wide_users(self, obj):
        return obj.program_wide

    @admin.display(description=_('Client-scoped'), ordering='client_scoped')
    def client_scoped_users(self, obj):
        return obj.client_scoped


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """Admin configuration for CustomUser model."""

    model = CustomUser

    list_display = (
        'emirates_id', 'email', 'first_name', 'last_name',
        'get_roles_display', 'client_type', 'designation', 'is_active', 'is_staff'
    )
    list_display_links = ('emirates_id', 'email')
    list_filter = ('roles', 'client_type', 'is_active', 'is_staff')
    search_fields = ('emirates_id', 'email', 'first_name', 'last_name', 'designation', 'department')
    ordering = ('first_name', 'last_name')
    filter_horizontal = ('roles', 'groups', 'user_permissions')

    readonly_fields = ('public_id',)

    fieldsets = (
        (None, {'fields': ('public_id', 'emirates_id', 'password')}),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name', 'email', 'phone')
        }),
        (_('Roles & Client Scope'), {
            'fields': ('roles', 'client_type', 'designation', 'department')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'emirates_id', 'email', 'first_name', 'last_name',
                'password1', 'password2', 'roles', 'client_type', 'designation', 'department'
            ),
        }),
    )

    def get_roles_display(self, obj):
        """Return comma-separated list of role names."""
        return obj.get_role_display()
    get_roles_display.short_description = _('Roles')
