"""Admin configuration for permission_plus."""

from django import forms
from django.contrib import admin
from django.contrib.contenttypes.admin import GenericTabularInline

from permission_plus.models import (
    Group,
    GroupMembership,
    Permission,
    PermissionAssignment,
    PermissionGuard,
    Role,
    RoleAssignment,
)


class GroupForm(forms.ModelForm):
    """Form for Group making the description optional."""

    class Meta:
        """Meta class for GroupForm."""

        model = Group
        fields = "__all__"

    def __init__(self, *args, **kwargs):
        """Initialize GroupForm."""
        super().__init__(*args, **kwargs)
        self.fields["description"].required = False


class PermissionInline(admin.TabularInline):
    """Inline admin listing the permissions of a guard."""

    model = Permission
    extra = 0
    fields = ("key", "name")


class RolePermissionInline(GenericTabularInline):
    """Inline admin for the permissions held by a role."""

    model = PermissionAssignment
    ct_field = "subject_type"
    ct_fk_field = "subject_id"
    extra = 0
    fields = ("permission", "created_at")
    readonly_fields = ("created_at",)


class GroupRoleInline(GenericTabularInline):
    """Inline admin for the roles held by a group."""

    model = RoleAssignment
    ct_field = "subject_type"
    ct_fk_field = "subject_id"
    extra = 0
    fields = ("role", "created_at")
    readonly_fields = ("created_at",)


@admin.register(PermissionGuard)
class PermissionGuardAdmin(admin.ModelAdmin):
    """Admin for guards with their permissions inline."""

    list_display = ("id", "key", "name", "updated_at")
    search_fields = ("key",)
    inlines = [PermissionInline]


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "name", "permission_guard")
    search_fields = ("key", "permission_guard__key")
    list_filter = ("permission_guard",)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    """Admin for roles with their permissions inline."""

    list_display = ("id", "key", "name", "updated_at")
    search_fields = ("key",)
    inlines = [RolePermissionInline]


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin for groups with their roles inline."""

    form = GroupForm
    list_display = ("id", "key", "name", "is_active")
    search_fields = ("key",)
    list_filter = ("is_active",)
    inlines = [GroupRoleInline]


@admin.register(RoleAssignment)
class RoleAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "role", "subject_type", "subject_id", "created_at")
    search_fields = ("role__key",)
    list_filter = ("subject_type",)


@admin.register(PermissionAssignment)
class PermissionAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "permission", "subject_type", "subject_id", "created_at")
    search_fields = ("permission__key",)
    list_filter = ("subject_type",)


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    list_display = ("id", "group", "groupable_type", "groupable_id", "created_at")
    search_fields = ("group__key",)
    list_filter = ("groupable_type",)
