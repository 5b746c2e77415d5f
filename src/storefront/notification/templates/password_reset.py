"""Password reset — carries the one-time reset link."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.base import layout, text


class PasswordResetTemplate:
    notification_type = NotificationType.PASSWORD_RESET.value

    @staticmethod
    def render(context: dict) -> dict:
        reset_link = context["reset_link"]
        header = f"<h1>Reset Your Password</h1><p>Hello {text(context.get('name') or 'there')},</p>"
        content = (
            "<p>We received a request to reset your password. "
            "Click the button below to create a new password:</p>"
            f'<p style="text-align: center;"><a href="{text(reset_link)}" class="btn">Reset Password</a></p>'
            "<p>If you didn't request this password reset, please ignore this email. "
            "Your password will remain unchanged.</p>"
        )
        return {
            "subject": "Reset Your Password",
            "html": layout("Reset Your Password", header, content),
        }
