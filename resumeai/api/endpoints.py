"""Backend endpoint paths, relative to the API base URL."""

from urllib.parse import quote

# Authentication
LOGIN = "auth/login"
REGISTER = "auth/register"
VERIFY_OTP = "auth/verifyOtp"
RESEND_OTP = "auth/resendOtp"
FORGOT_PASSWORD_OTP = "auth/forgotPasswordOtp"
VERIFY_FORGOT_PASSWORD_OTP = "auth/verifyforgotPasswordOtp"
REQUEST_PASSWORD = "auth/requestPassword"
CHANGE_PASSWORD = "auth/changePassword"

# Users
USER_PROFILE = "users/profile"
USER_ANALYTICS = "users/analytics"

# Notifications
NOTIFICATIONS = "notifications"
NOTIFICATION_BY_ID = "notifications/:id"
NOTIFICATION_MARK_READ = "notifications/:id/read"
NOTIFICATION_MARK_UNREAD = "notifications/:id/unread"
NOTIFICATION_MARK_ALL_READ = "notifications/mark-all-read"
NOTIFICATION_DELETE_READ = "notifications/read"
NOTIFICATION_DELETE_ALL = "notifications/all"
NOTIFICATION_STATS = "notifications/stats"
NOTIFICATION_PREFERENCES = "notifications/preferences"

# Feedback
FEEDBACK = "feedback"
FEEDBACK_ANONYMOUS = "feedback/anonymous"
FEEDBACK_USER = "feedback/user"
FEEDBACK_BY_ID = "feedback/:id"
FEEDBACK_VOTE = "feedback/:id/vote"
FEEDBACK_STATS = "feedback/stats/overview"
FEEDBACK_STATUS = "feedback/:id/status"
FEEDBACK_NOTES = "feedback/:id/notes"
FEEDBACK_RESOLVE = "feedback/:id/resolve"

# AI tools
AI_GENERATE_SUMMARY = "ai/generate-summary"
AI_ENHANCE_EXPERIENCE = "ai/enhance-experience"
AI_ANALYZE_SKILLS = "ai/analyze-skills"
AI_FORMAT_EDUCATION = "ai/format-education"
AI_GENERATE_COVER_LETTER = "ai/generate-cover-letter"


def build_path(template: str, record_id: str) -> str:
    """Fill the ``:id`` placeholder of ``template`` with a URL-safe id."""
    if ":id" not in template:
        raise ValueError(f"Endpoint has no :id placeholder: {template}")
    return template.replace(":id", quote(str(record_id), safe=""))
