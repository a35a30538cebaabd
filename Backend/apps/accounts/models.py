from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def normalize_email(self, email):
        """Lowercase and trim the whole address; emails are unique case-insensitively."""
        return (email or '').strip().lower()

    def get_by_natural_key(self, username):
        return self.get(email=self.normalize_email(username))

    def create_user(self, email, password=None, **extra_fields):
        """Create and save an active participant with the given email and password."""
        if not email:
            raise ValueError(_('The Email field must be set'))
        email = self.normalize_email(email)
        extra_fields.setdefault('status', User.STATUS_ACTIVE)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a course administrator."""
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_ADMIN)
        extra_fields.setdefault('status', User.STATUS_ACTIVE)
        extra_fields.setdefault('joined_at', timezone.now())

        if extra_fields.get('role') != User.ROLE_ADMIN:
            raise ValueError(_('Superuser must have role=admin.'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Course account.

    Invitation state lives on the account itself: an invited account has
    an unusable password, a hashed invitation token and an expiry. The
    token fields are cleared when the invitation is redeemed.

    Status lifecycle: invited/pending -> active <-> inactive.
    """

    ROLE_ADMIN = 'admin'
    ROLE_PARTICIPANT = 'participant'

    ROLE_CHOICES = [
        (ROLE_ADMIN, _('Admin')),
        (ROLE_PARTICIPANT, _('Participant')),
    ]

    STATUS_PENDING = 'pending'
    STATUS_INVITED = 'invited'
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'

    STATUS_CHOICES = [
        (STATUS_PENDING, _('Pending')),
        (STATUS_INVITED, _('Invited')),
        (STATUS_ACTIVE, _('Active')),
        (STATUS_INACTIVE, _('Inactive')),
    ]

    INVITATION_STATUSES = (STATUS_PENDING, STATUS_INVITED)

    # Basic Information
    email = models.EmailField(_('email address'), unique=True)
    full_name = models.CharField(_('full name'), max_length=255, blank=True)

    # Role and lifecycle
    role = models.CharField(_('role'), max_length=20, choices=ROLE_CHOICES, default=ROLE_PARTICIPANT)
    status = models.CharField(_('status'), max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Invitation
    invite_token_hash = models.CharField(
        _('invite token hash'),
        max_length=64,
        null=True,
        blank=True,
        unique=True,
        help_text=_('SHA-256 of the invitation token; the raw token is never stored')
    )
    token_expires_at = models.DateTimeField(_('token expires at'), null=True, blank=True)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='invited_users',
        null=True,
        blank=True,
        verbose_name=_('invited by')
    )

    # Timestamps
    joined_at = models.DateTimeField(_('joined at'), null=True, blank=True)
    created_at = models.DateTimeField(_('created at'), default=timezone.now)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['full_name']

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role', 'status'], name='accounts_role_status_idx'),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        self.email = self.__class__.objects.normalize_email(self.email)
        super().save(*args, **kwargs)

    def get_full_name(self):
        return self.full_name.strip()

    def get_short_name(self):
        return self.full_name.split(' ')[0] if self.full_name else self.email

    @property
    def display_name(self):
        return self.get_full_name() or self.email

    @property
    def is_active(self):
        """Only active accounts may log in or hold a valid session."""
        return self.status == self.STATUS_ACTIVE

    @property
    def is_staff(self):
        """Administrators get access to the Django admin site."""
        return self.role == self.ROLE_ADMIN

    @property
    def is_admin(self):
        """Check if user is a course administrator."""
        return self.role == self.ROLE_ADMIN

    @property
    def is_participant(self):
        """Check if user is a course participant."""
        return self.role == self.ROLE_PARTICIPANT

    @property
    def has_pending_invitation(self):
        return self.status in self.INVITATION_STATUSES

    @property
    def invitation_expired(self):
        """True when an open invitation is past its expiry."""
        if not self.has_pending_invitation or self.token_expires_at is None:
            return False
        return self.token_expires_at < timezone.now()
