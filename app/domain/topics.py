"""Bus topic names, following the ``<domain>.<action>`` convention."""

CARE_PLAN_CREATED = "care-plan.created"
CARE_PLAN_UPDATED = "care-plan.updated"
CARE_PLAN_APPROVED = "care-plan.approved"
CARE_PLAN_STATUS_CHANGED = "care-plan.status-changed"
CARE_PLAN_GENERATION_REQUESTED = "care-plan.generation-requested"

SERVICES_PLAN_CREATED = "services-plan.created"
SERVICES_PLAN_UPDATED = "services-plan.updated"
SERVICES_PLAN_APPROVED = "services-plan.approved"
SERVICES_PLAN_STATUS_CHANGED = "services-plan.status-changed"

DOCUMENT_UPLOADED = "document.uploaded"
DOCUMENT_ANALYZED = "document.analyzed"
DOCUMENT_STATUS_CHANGED = "document.status.changed"

PROVIDER_PROFILE_UPDATED = "provider.profile.updated"
PROVIDER_AVAILABILITY_UPDATED = "provider.availability.updated"
PROVIDER_REVIEW_SUBMITTED = "provider.review.submitted"
PROVIDER_SERVICE_AREA_UPDATED = "provider.service-area.updated"

USER_REGISTERED = "user.registered"
EMAIL_VERIFIED = "email.verified"
PASSWORD_RESET = "password.reset"
PASSWORD_RESET_REQUESTED = "password.reset.requested"
LOGIN_ATTEMPT_FAILED = "login.attempt.failed"
USER_LOGGED_IN = "user.logged.in"

NOTIFICATION_CREATED = "notification.created"
NOTIFICATION_DELIVERED = "notification.delivered"
NOTIFICATION_READ = "notification.read"
NOTIFICATION_ALL_READ = "notification.all-read"
NOTIFICATION_REALTIME = "notification.realtime"
