from dataclasses import dataclass


@dataclass
class EmailTemplates:
    SIGNUP_CONFIRMATION_SUBJECT = "Confirm your email address"
    SIGNUP_CONFIRMATION_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Hi {recipient_name},</p>

        <p>Thanks for signing up! Please confirm your email address so you can start creating your event pages.</p>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{confirm_url}" style="background-color: #3B82F6; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-size: 18px;">
                Confirm email
            </a>
        </div>

        <p>If the button doesn't work, you can copy and paste the following link into your browser:</p>
        <p style="word-break: break-all;"><a href="{confirm_url}">{confirm_url}</a></p>

        <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">

        <p style="font-size: 12px; color: #888; text-align: center;">
            If you did not create an account, you can ignore this email.
        </p>
    </body>
    </html>
    """

    SIGNUP_CONFIRMATION_TEXT = """
    Hi {recipient_name},

    Thanks for signing up! Please confirm your email address by visiting:
    {confirm_url}

    If you did not create an account, you can ignore this email.
    """

    @classmethod
    def render_signup_confirmation(cls, recipient_name: str, confirm_url: str) -> tuple[str, str, str]:
        """Return subject, html body and text body."""
        context = {"recipient_name": recipient_name, "confirm_url": confirm_url}
        return (
            cls.SIGNUP_CONFIRMATION_SUBJECT,
            cls.SIGNUP_CONFIRMATION_HTML.format(**context),
            cls.SIGNUP_CONFIRMATION_TEXT.format(**context),
        )
