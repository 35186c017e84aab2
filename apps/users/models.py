"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom User model with role-based access control (RBAC).
             Staff log in with their Emirates ID and may be scoped to a
             single client type (FDF, ADHA, Cash). Uses database-driven
             Role model for dynamic permissions.
-------------------------------------------------------------------------
"""
import re
import uuid
from typing import Optional, List
from django.contrib.auth.models import AbstractUser, BaseUserManager, Group
from django.db import models
from django.utils.translation import gettext_lazy as _


def normalize_emirates_id(value: Optional[str]) -> str:
    """Strip dashes and spaces so '784-1234-1234567-1' is stored as 15 digits."""
    return re.sub(r'\D', '', value or '')


class RoleCode(models.TextChoices):
    """
    Standard role codes for the system.

    These are used as reference codes when creating Role objects.
    """
    SUPER_ADMIN = 'SUPER_ADMIN', _('Super Administrator')
    PROGRAM_MANAGER = 'PROGRAM_MANAGER', _('Programme Manager')
    CASE_WORKER = 'CASE_WORKER', _('Case Worker')
    ASSESSOR = 'ASSESSOR', _('Field Assessor')
    COMMITTEE_CHAIR = 'COMMITTEE_CHAIR', _('Committee Chairperson')
    COMMITTEE_MEMBER = 'COMMITTEE_MEMBER', _('Committee Member')
    COMMITTEE_SECRETARY = 'COMMITTEE_SECRETARY', _('Committee Secretary')
    RESOURCE_MANAGER = 'RESOURCE_MANAGER', _('Resource Manager')
    FINANCE_OFFICER = 'FINANCE_OFFICER', _('Finance Officer')
    SENIOR_MANAGEMENT = 'SENIOR_MANAGEMENT', _('Senior Management')


class Role(models.Model):
    """
    Dynamic Role model for database-driven RBAC.

    Linked 1-to-1 with Django's Group model to leverage standard
    Django permissions system. Roles can be assigned to users
    via ManyToMany relationship.

    Attributes:
        name: Human-readable role name.
        code: Unique slug identifier for the role.
        description: Detailed description of the role's responsibilities.
        group: Associated Django Group for permission management.
        is_system_role: If True, role cannot be deleted by users.
    """

    name = models.CharField(
        max_length=100,
        verbose_name=_('Role Name'),
        help_text=_('Human-readable name for the role.')
    )
    code = models.SlugField(
        max_length=50,
        unique=True,
        verbose_name=_('Role Code'),
        help_text=_('Unique identifier code (e.g., CASE_WORKER, COMMITTEE_MEMBER).')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description'),
        help_text=_('Detailed description of role responsibilities.')
    )
    group = models.OneToOneField(
        Group,
        on_delete=models.CASCADE,
        related_name='cms_role',
        verbose_name=_('Django Group'),
        help_text=_('Associated Django Group for permissions.')
    )
    is_system_role = models.BooleanField(
        default=False,
        verbose_name=_('System Role'),
        help_text=_('System roles cannot be deleted by users.')
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Role')
        verbose_name_plural = _('Roles')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        """Create or update the associated Django Group."""
        if not self.pk:
            group, created = Group.objects.get_or_create(name=self.name)
            self.group = group
        elif self.group and self.group.name != self.name:
            self.group.name = self.name
            self.group.save()
        super().save(*args, **kwargs)

    @classmethod
    def get_by_code(cls, code: str) -> Optional['Role']:
        """
        Get a role by its code.

        Args:
            code: The role code to look up.

        Returns:
            Role instance or None if not found.
        """
        try:
            return cls.objects.get(code=code)
        except cls.DoesNotExist:
            return None


class CustomUserManager(BaseUserManager):
    """
    Custom manager for CustomUser model.

    Provides methods to create regular users and superusers with
    proper validation of required fields.
    """

    def get_by_natural_key(self, username):
        return self.get(**{self.model.USERNAME_FIELD: normalize_emirates_id(username)})

    def create_user(
        self,
        emirates_id: str,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """
        Create and return a regular user.

        Args:
            emirates_id: Emirates ID number (unique identifier).
            email: User's email address.
            password: User's password.
            **extra_fields: Additional fields for the user model.

        Returns:
            The created CustomUser instance.

        Raises:
            ValueError: If emirates_id is not provided.
        """
        if not emirates_id:
            raise ValueError(_('Emirates ID is required for user creation.'))

        email = self.normalize_email(email)
        user = self.model(emirates_id=emirates_id, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        emirates_id: str,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """
        Create and return a superuser.

        Args:
            emirates_id: Emirates ID number.
            email: User's email address.
            password: User's password.
            **extra_fields: Additional fields for the user model.

        Returns:
            The created superuser CustomUser instance.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        user = self.create_user(emirates_id, email, password, **extra_fields)

        super_admin_role = Role.get_by_code(RoleCode.SUPER_ADMIN)
        if super_admin_role:
            user.roles.add(super_admin_role)

        return user


class CustomUser(AbstractUser):
    """
    Custom User model for Barakatna CMS.

    Uses the Emirates ID as the unique identifier instead of username.
    Implements role-based access control with client-type scoping.

    Attributes:
        emirates_id: Unique 15-digit Emirates ID number.
        email: User's email address.
        roles: Roles assigned to this user.
        client_type: The client type this user works for (null for programme-wide staff).
        designation: Official job title.
        department: Department or team name.
        phone: Contact phone number.
    """

    username = None

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name=_('Public ID'),
        help_text=_('Unique UUID for external reference.')
    )

    emirates_id = models.CharField(
        max_length=18,
        unique=True,
        verbose_name=_('Emirates ID'),
        help_text=_('15-digit Emirates ID number (e.g., 784-1234-1234567-1).')
    )
    email = models.EmailField(
        unique=True,
        verbose_name=_('Email Address')
    )

    roles = models.ManyToManyField(
        Role,
        blank=True,
        related_name='users',
        verbose_name=_('Roles'),
        help_text=_('Roles assigned to this user.')
    )

    # NULL for programme-wide staff who work across all client types
    client_type = models.ForeignKey(
        'clients.ClientType',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='staff',
        verbose_name=_('Client Type'),
        help_text=_('Client type this user is scoped to. Null for programme-wide staff.')
    )

    designation = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Designation'),
        help_text=_('Official job title (e.g., Senior Case Worker).')
    )
    department = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Department'),
        help_text=_('Department or team this user belongs to.')
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Phone Number')
    )

    first_name = models.CharField(
        max_length=150,
        verbose_name=_('First Name')
    )
    last_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name=_('Last Name')
    )

    objects = CustomUserManager()

    USERNAME_FIELD = 'emirates_id'
    REQUIRED_FIELDS = ['email', 'first_name']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['first_name', 'last_name']

    def save(self, *args, **kwargs):
        """Normalize the Emirates ID by stripping non-digit characters before saving."""
        if self.emirates_id:
            self.emirates_id = normalize_emirates_id(self.emirates_id)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        """Return user's full name and role."""
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self) -> str:
        """Return the user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self) -> str:
        """Return the user's first name."""
        return self.first_name

    def get_role_display(self) -> str:
        """Return comma-separated list of role names."""
        role_names = list(self.roles.values_list('name', flat=True))
        if role_names:
            return ', '.join(role_names)
        return 'No Role'

    def has_role(self, role_code: str) -> bool:
        """
        Check if user has a specific role by code.

        Args:
            role_code: The role code to check (e.g., 'CASE_WORKER').

        Returns:
            True if user has the role, False otherwise.
        """
        return self.roles.filter(code=role_code).exists()

    def has_any_role(self, role_codes: List[str]) -> bool:
        """
        Check if user has any of the specified roles.

        Superusers pass every check.
        """
        if self.is_superuser:
            return True
        return self.roles.filter(code__in=role_codes).exists()

    def get_role_codes(self) -> List[str]:
        """Return list of role codes assigned to this user."""
        return list(self.roles.values_list('code', flat=True))

    # Role-checking methods
    def is_super_admin(self) -> bool:
        """Check if user is a super administrator."""
        return self.is_superuser or self.has_role(RoleCode.SUPER_ADMIN)

    def is_program_manager(self) -> bool:
        return self.has_any_role([RoleCode.PROGRAM_MANAGER])

    def is_case_worker(self) -> bool:
        return self.has_any_role([RoleCode.CASE_WORKER])

    def is_assessor(self) -> bool:
        return self.has_any_role([RoleCode.ASSESSOR])

    def is_committee_member(self) -> bool:
        """Chairs and secretaries count as committee members."""
        return self.has_any_role([
            RoleCode.COMMITTEE_MEMBER,
            RoleCode.COMMITTEE_CHAIR,
            RoleCode.COMMITTEE_SECRETARY,
        ])

    def is_committee_chair(self) -> bool:
        return self.has_any_role([RoleCode.COMMITTEE_CHAIR])

    def is_resource_manager(self) -> bool:
        return self.has_any_role([RoleCode.RESOURCE_MANAGER])

    def is_finance_officer(self) -> bool:
        return self.has_any_role([RoleCode.FINANCE_OFFICER])

    def is_senior_management(self) -> bool:
        return self.has_any_role([RoleCode.SENIOR_MANAGEMENT])

    def is_program_wide(self) -> bool:
        """Programme-wide staff are not scoped to a client type."""
        return self.client_type_id is None

    def can_access_client_type(self, client_type) -> bool:
        """
        Check if user can access data of the given client type.

        Args:
            client_type: The ClientType to check access for (None = generic records).

        Returns:
            True if user can access the client type's data.
        """
        if self.is_program_wide():
            return True
        if client_type is None:
            return True
        return self.client_type_id == client_type.id

    def can_register_beneficiaries(self) -> bool:
        """Case workers and programme managers register beneficiaries."""
        return self.has_any_role([RoleCode.CASE_WORKER, RoleCode.PROGRAM_MANAGER])

    def can_decide_submissions(self) -> bool:
        """Committee chairs and members decide submissions."""
        return self.has_any_role([RoleCode.COMMITTEE_CHAIR, RoleCode.COMMITTEE_MEMBER])

    def can_manage_resources(self) -> bool:
        return self.has_any_role([RoleCode.RESOURCE_MANAGER, RoleCode.PROGRAM_MANAGER])

    def can_approve_timesheets(self) -> bool:
        return self.has_any_role([RoleCode.RESOURCE_MANAGER, RoleCode.PROGRAM_MANAGER])

    def can_view_kpis(self) -> bool:
        return self.has_any_role([
            RoleCode.SENIOR_MANAGEMENT,
            RoleCode.PROGRAM_MANAGER,
            RoleCode.RESOURCE_MANAGER,
        ])

    def can_manage_reports(self) -> bool:
        return self.has_any_role([
            RoleCode.SENIOR_MANAGEMENT,
            RoleCode.PROGRAM_MANAGER,
            RoleCode.FINANCE_OFFICER,
        ])
