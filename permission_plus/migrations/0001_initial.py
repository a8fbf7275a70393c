import django.db.models.deletion
from django.db import migrations, models

import permission_plus.models.fields
from permission_plus.conf import get_column_name, get_table_name


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
    ]

    operations = [
        migrations.CreateModel(
            name="PermissionGuard",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=255, unique=True)),
                ("name", permission_plus.models.fields.TranslationsField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Permission Guard",
                "verbose_name_plural": "Permission Guards",
                "db_table": get_table_name("permission_guards"),
            },
        ),
        migrations.CreateModel(
            name="Role",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=255, unique=True)),
                ("name", permission_plus.models.fields.TranslationsField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": get_table_name("roles"),
            },
        ),
        migrations.CreateModel(
            name="Group",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=255, unique=True)),
                ("name", permission_plus.models.fields.TranslationsField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("description", permission_plus.models.fields.TranslationsField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": get_table_name("groups"),
            },
        ),
        migrations.CreateModel(
            name="Permission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=255, unique=True)),
                ("name", permission_plus.models.fields.TranslationsField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "permission_guard",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="permissions",
                        to="permission_plus.permissionguard",
                    ),
                ),
            ],
            options={
                "db_table": get_table_name("permissions"),
            },
        ),
        migrations.CreateModel(
            name="RoleAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subject_id", models.PositiveBigIntegerField(db_column=get_column_name("model_morph_key"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "role",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="permission_plus.role",
                    ),
                ),
                (
                    "subject_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="contenttypes.contenttype",
                    ),
                ),
            ],
            options={
                "db_table": get_table_name("role_assignments"),
                "indexes": [
                    models.Index(fields=["subject_id", "subject_type"], name="pp_role_assign_subject_idx"),
                    models.Index(fields=["role", "subject_id", "subject_type"], name="pp_role_assign_lookup_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("role", "subject_type", "subject_id"),
                        name="pp_unique_role_assignment",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PermissionAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subject_id", models.PositiveBigIntegerField(db_column=get_column_name("model_morph_key"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "permission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="permission_plus.permission",
                    ),
                ),
                (
                    "subject_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="contenttypes.contenttype",
                    ),
                ),
            ],
            options={
                "db_table": get_table_name("permission_assignments"),
                "indexes": [
                    models.Index(fields=["subject_id", "subject_type"], name="pp_perm_assign_subject_idx"),
                    models.Index(fields=["permission", "subject_id", "subject_type"], name="pp_perm_assign_lookup_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("permission", "subject_type", "subject_id"),
                        name="pp_unique_perm_assignment",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="GroupMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("groupable_id", models.PositiveBigIntegerField(db_column=get_column_name("group_morph_key"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="permission_plus.group",
                    ),
                ),
                (
                    "groupable_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="contenttypes.contenttype",
                    ),
                ),
            ],
            options={
                "db_table": get_table_name("groupables"),
                "indexes": [
                    models.Index(fields=["groupable_id", "groupable_type"], name="pp_groupable_subject_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("group", "groupable_type", "groupable_id"),
                        name="unique_group_assignment",
                    ),
                ],
            },
        ),
    ]
