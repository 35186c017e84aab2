# Generated manually on 2026-10-12
import uuid

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Role',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Human-readable name for the role.', max_length=100, verbose_name='Role Name')),
                ('code', models.SlugField(help_text='Unique identifier code (e.g., CASE_WORKER, COMMITTEE_MEMBER).', unique=True, verbose_name='Role Code')),
                ('description', models.TextField(blank=True, help_text='Detailed description of role responsibilities.', verbose_name='Description')),
                ('is_system_role', models.BooleanField(default=False, help_text='System roles cannot be deleted by users.', verbose_name='System Role')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.OneToOneField(help_text='Associated Django Group for permissions.', on_delete=django.db.models.deletion.CASCADE, related_name='cms_role', to='auth.group', verbose_name='Django Group')),
            ],
            options={
                'verbose_name': 'Role',
                'verbose_name_plural': 'Roles',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CustomUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('emirates_id', models.CharField(help_text='15-digit Emirates ID number (e.g., 784-1234-1234567-1).', max_length=18, unique=True, verbose_name='Emirates ID')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Email Address')),
                ('designation', models.CharField(blank=True, help_text='Official job title (e.g., Senior Case Worker).', max_length=100, verbose_name='Designation')),
                ('department', models.CharField(blank=True, help_text='Department or team this user belongs to.', max_length=100, verbose_name='Department')),
                ('phone', models.CharField(blank=True, max_length=20, verbose_name='Phone Number')),
                ('first_name', models.CharField(max_length=150, verbose_name='First Name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='Last Name')),
                ('client_type', models.ForeignKey(blank=True, help_text='Client type this user is scoped to. Null for programme-wide staff.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='staff', to='clients.clienttype', verbose_name='Client Type')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
                ('roles', models.ManyToManyField(blank=True, help_text='Roles assigned to this user.', related_name='users', to='users.role', verbose_name='Roles')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['first_name', 'last_name'],
            },
        ),
    ]
